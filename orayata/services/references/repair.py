# orayata/services/references/repair.py
"""
Best-effort repair for references the catalogue rejected.

Collapses "Book Chapter:Verse" into Sefaria's dotted form and rebuilds
the link. This is a single deterministic rewrite, not a search: it never
asks the catalogue for alternate spellings, and it does not apply the
compound-code formatting that build_url uses for fresh citations.
"""

import logging
import re

from .reference_parser import TextReference
from .sefaria_links import CanonicalUrl, build_url

logger = logging.getLogger(__name__)


def repair(reference: TextReference) -> CanonicalUrl:
    """
    Rebuild a link from a reference's raw text.

    "Genesis 1:1-3" -> https://www.sefaria.org/Genesis.1.1-3

    Whitespace runs become dots, and so does the first colon. A dotted
    compound code comes back canonical:
    "Mishneh Torah, Hilchot Deot 1:1-5"
        -> https://www.sefaria.org/Mishneh_Torah%2C_Hilchot.Deot.1.1-5

    Raises:
        MalformedReference: If the reference is empty
    """
    dotted = re.sub(r'\s+', '.', reference.text.strip())
    dotted = dotted.replace(':', '.', 1)
    url = build_url(dotted)
    logger.debug(f"Repaired {reference.text!r} -> {url}")
    return url
