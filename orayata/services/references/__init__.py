# orayata/services/references/__init__.py
"""
Sefaria reference handling for Orayata.

This package provides:
- TextReference: Parsed citation (work + locator)
- parse_reference: Parse human-readable citations
- is_recognized_url / normalize / build_url: Canonical Sefaria links
- extract_reference / extract_ref_path: Recover references from links
- SefariaClient: Catalogue probe returning a ValidationOutcome
- repair: Best-effort rebuild of a rejected link
"""

from .reference_parser import (
    COMPOUND_CODES,
    TextReference,
    parse_reference,
    is_compound_code,
)
from .sefaria_links import (
    CANONICAL_BASE,
    CanonicalUrl,
    MalformedReference,
    is_recognized_url,
    normalize,
    extract_ref_path,
    extract_reference,
    build_url,
)
from .sefaria_client import (
    LinkStatus,
    ValidationOutcome,
    SefariaClient,
)
from .repair import repair

__all__ = [
    # Parsing
    "COMPOUND_CODES",
    "TextReference",
    "parse_reference",
    "is_compound_code",
    # Canonical links
    "CANONICAL_BASE",
    "CanonicalUrl",
    "MalformedReference",
    "is_recognized_url",
    "normalize",
    "extract_ref_path",
    "extract_reference",
    "build_url",
    # Catalogue probe
    "LinkStatus",
    "ValidationOutcome",
    "SefariaClient",
    # Repair
    "repair",
]
