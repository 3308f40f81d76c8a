# orayata/services/references/reference_parser.py
"""
Citation parser for Sefaria text references.

Splits a citation into the work it names and its locator:
- Ordinary works: "Genesis 1:1-3" -> work "Genesis", locator "1:1-3"
- Multi-word titles: "Pirkei Avot 2:4" -> work "Pirkei Avot", locator "2:4"
- Compound codes: "Mishneh Torah, Hilchot Deot 1:1-5"
  -> work "Mishneh Torah, Hilchot Deot", locator "1:1-5"
- Talmud folios: "Berakhot 2a" -> work "Berakhot", locator "2a"
- Title only: "Berakhot" -> work "Berakhot", locator None

The locator starts at the first token beginning with a digit. The first
token always belongs to the work, so "1 Samuel 3:1" keeps "1 Samuel".
"""

import re
from dataclasses import dataclass
from typing import List, Optional


# Named codes whose canonical title joins code name and section with a comma
COMPOUND_CODES = ("Mishneh Torah",)


@dataclass(frozen=True)
class TextReference:
    """
    A logical citation.

    Attributes:
        work: Title of the work, possibly compound ("Mishneh Torah, Hilchot Deot")
        locator: Chapter/verse expression ("1:1-5", "2a"), None for a bare title
    """
    work: str
    locator: Optional[str] = None

    @property
    def text(self) -> str:
        """Return the citation as a single human-readable string."""
        if self.locator:
            return f"{self.work} {self.locator}"
        return self.work

    @property
    def is_compound(self) -> bool:
        """True if the work is a compound code such as the Mishneh Torah."""
        return is_compound_code(self.work)

    @classmethod
    def from_path(cls, path: str) -> Optional["TextReference"]:
        """
        Parse a decoded Sefaria URL path.

        "Genesis.1:1-3" -> TextReference("Genesis", "1:1-3")
        "Mishneh_Torah,_Hilchot_Deot.1:1-5"
            -> TextReference("Mishneh Torah, Hilchot Deot", "1:1-5")

        Returns:
            TextReference, or None if the path holds no reference
        """
        segments = [s for s in path.strip("/").split(".") if s.strip()]
        if not segments:
            return None

        split_at = _locator_index(segments)
        work = " ".join(segments[:split_at]).replace("_", " ")
        work = _collapse_whitespace(work)
        locator = ".".join(s.strip() for s in segments[split_at:]) or None
        return cls(work=work, locator=locator)


def _collapse_whitespace(text: str) -> str:
    return re.sub(r'\s+', ' ', text).strip()


def _locator_index(tokens: List[str]) -> int:
    """Index of the first locator token, or len(tokens) if there is none."""
    for i, token in enumerate(tokens):
        if i > 0 and token[:1].isdigit():
            return i
    return len(tokens)


def is_compound_code(text: str) -> bool:
    """Check whether text names one of the known compound codes."""
    lowered = _collapse_whitespace(text).lower()
    return any(code.lower() in lowered for code in COMPOUND_CODES)


def parse_reference(ref_string: str) -> Optional[TextReference]:
    """
    Parse a human-readable citation.

    Whitespace-separated citations ("Genesis 1:1-3") are split on
    whitespace. A single dotted token ("Genesis.1.1-3") is treated as a
    Sefaria path.

    Args:
        ref_string: The citation to parse

    Returns:
        TextReference, or None for empty input
    """
    if not ref_string or not ref_string.strip():
        return None

    tokens = ref_string.split()
    if len(tokens) == 1 and "." in tokens[0]:
        return TextReference.from_path(tokens[0])

    split_at = _locator_index(tokens)
    work = " ".join(tokens[:split_at])
    locator = ".".join(tokens[split_at:]) or None
    return TextReference(work=work, locator=locator)
