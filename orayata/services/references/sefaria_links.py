# orayata/services/references/sefaria_links.py
"""
Canonical Sefaria link handling.

Pure functions, no I/O:
- is_recognized_url: shape check for sefaria.org / sefaria.org.il links
- normalize: rewrite to the canonical host and repair dotted compound codes
- extract_ref_path / extract_reference: recover the reference from a link
- build_url: format a citation as a canonical link

Canonical shape:
    https://www.sefaria.org/<encoded path>[?lang=..][&layout=..][&with=a,b]
"""

import re
from typing import NewType, Optional
from urllib.parse import quote, unquote, urlencode

from .reference_parser import TextReference, is_compound_code, parse_reference


CanonicalUrl = NewType("CanonicalUrl", str)

CANONICAL_BASE = "https://www.sefaria.org"

_RECOGNIZED_URL = re.compile(r'^https://(?:www\.)?sefaria\.org(?:\.il)?/.+', re.DOTALL)
_HOST_PREFIX = re.compile(r'^https://(?:www\.)?sefaria\.org(?:\.il)?(?=/)')

# Upstream sometimes dot-delimits the code name like a locator:
# "Mishneh.Torah,.Hilchot.Deot.1.1-5"
_DOTTED_COMPOUND_CODE = re.compile(r'Mishneh\.Torah(,|%2C|%2c)?(\.)?')

# encodeURIComponent leaves these unescaped on top of quote()'s defaults
_URI_COMPONENT_SAFE = "!~*'()"


class MalformedReference(ValueError):
    """Raised when a link is not a Sefaria link or holds no reference."""
    pass


def is_recognized_url(url: str) -> bool:
    """
    Check if a URL is a Sefaria link on the primary or regional domain.

    Accepts https://[www.]sefaria.org/<path> and
    https://[www.]sefaria.org.il/<path>, path non-empty.
    """
    if not isinstance(url, str):
        return False
    return bool(_RECOGNIZED_URL.match(url))


def _undot_compound_code(match: re.Match) -> str:
    comma, dot = match.group(1), match.group(2)
    if comma:
        return "Mishneh_Torah" + comma + ("_" if dot else "")
    return "Mishneh_Torah" + ("." if dot else "")


def normalize(url: str) -> CanonicalUrl:
    """
    Normalize a Sefaria link to its canonical form.

    1. sefaria.org.il (with or without www) -> www.sefaria.org
    2. "Mishneh.Torah,." in the path -> "Mishneh_Torah,_"; the rest of
       the path (tractate name and locator) is left as is.

    Raises:
        MalformedReference: If the URL is not a recognized Sefaria link
    """
    if not is_recognized_url(url):
        raise MalformedReference(f"Invalid Sefaria URL: {url!r}")

    rest = _HOST_PREFIX.sub("", url, count=1)
    path, sep, query = rest.partition("?")
    path = _DOTTED_COMPOUND_CODE.sub(_undot_compound_code, path)

    return CanonicalUrl(f"{CANONICAL_BASE}{path}{sep}{query}")


def extract_ref_path(url: str) -> Optional[str]:
    """
    Extract the percent-decoded reference path from a Sefaria link.

    "https://www.sefaria.org.il/Genesis.1.1-3?lang=en" -> "Genesis.1.1-3"

    Returns:
        Decoded path, or None if the link has no reference

    Raises:
        MalformedReference: If the URL is not a recognized Sefaria link
    """
    canonical = normalize(url)
    path = canonical[len(CANONICAL_BASE):]
    path = path.split("?", 1)[0].split("#", 1)[0].strip("/")
    if not path:
        return None
    return unquote(path)


def extract_reference(url: str) -> Optional[TextReference]:
    """
    Extract the reference from a Sefaria link.

    "https://www.sefaria.org/Genesis.1%3A1-3" -> TextReference("Genesis", "1:1-3")
    """
    path = extract_ref_path(url)
    if path is None:
        return None
    return TextReference.from_path(path)


def _format_path(text: str) -> str:
    if is_compound_code(text):
        ref = parse_reference(text)
        path = re.sub(r'\s+', '_', ref.work)
        if ref.locator:
            path = f"{path}.{ref.locator}"
        return path
    return re.sub(r'\s+', '.', text)


def build_url(reference_text: str, options: Optional[dict] = None) -> CanonicalUrl:
    """
    Build a canonical Sefaria link from a citation.

    "Genesis 1:1-3" -> https://www.sefaria.org/Genesis.1%3A1-3
    "Mishneh Torah, Hilchot Deot 1:1-5"
        -> https://www.sefaria.org/Mishneh_Torah%2C_Hilchot_Deot.1%3A1-5

    Ordinary works join every word with dots. Compound codes join the
    code name with underscores and append the locator with a dot.
    Already-dotted citations ("Mishneh.Torah,.Hilchot.Deot.1.1-5") go
    through normalize like any recognized link.

    Args:
        reference_text: Citation text
        options: Optional dict with "language" ("he"|"en"), "layout"
                 ("hebrew"|"english") and "with" (list of commentaries)

    Raises:
        MalformedReference: If the citation is empty
    """
    options = options or {}
    text = " ".join((reference_text or "").split())
    if not text:
        raise MalformedReference("Empty reference")

    encoded = quote(_format_path(text), safe=_URI_COMPONENT_SAFE)

    params = []
    if options.get("language"):
        params.append(("lang", options["language"]))
    if options.get("layout"):
        params.append(("layout", options["layout"]))
    with_ = options.get("with")
    if isinstance(with_, str):
        with_ = [with_]
    if with_:
        params.append(("with", ",".join(with_)))

    query = urlencode(params, safe=",")
    return normalize(f"{CANONICAL_BASE}/{encoded}{'?' + query if query else ''}")
