# orayata/services/sources/commentaries.py
"""
Recommended commentaries for a study source.

Picks the classic commentators for the kind of text a source quotes
(Tanach, Talmud, Rambam, Shulchan Aruch). Spiritual-growth topics get
none. The result is the list build_url takes as its "with" option.
"""

import re
from typing import List, Optional

from orayata.core.config import get_commentary_settings


def _mentions(text: str, keyword: str) -> bool:
    return re.search(rf'\b{re.escape(keyword.lower())}\b', text) is not None


def identify_source_type(title: str, reference: str = "", excerpt: str = "") -> Optional[str]:
    """
    Guess the source type from a source's title, reference and excerpt.

    "Hilchot Deot 1:1" -> "rambam", "Berachot 3a" -> "talmud",
    "Tehillim 23" -> "tanach". None if nothing matches.
    """
    settings = get_commentary_settings()
    keywords = settings.get("source_type_keywords") or {}
    text = f"{title or ''} {reference or ''} {excerpt or ''}".lower()

    order = list(settings.get("priority") or [])
    order += [t for t in keywords if t not in order]

    for source_type in order:
        if any(_mentions(text, keyword) for keyword in keywords.get(source_type, [])):
            return source_type
    return None


def select_commentaries(
    topic: str,
    title: str,
    reference: str = "",
    excerpt: str = "",
) -> List[str]:
    """
    Select the recommended commentaries for a source.

    Returns:
        The first commentators for the detected source type (two by
        default), or [] for spiritual-growth topics and unknown sources
    """
    settings = get_commentary_settings()
    lowered_topic = (topic or "").lower()
    if any(word in lowered_topic for word in settings.get("skip_topic_keywords") or []):
        return []

    source_type = identify_source_type(title, reference, excerpt)
    if source_type is None:
        return []

    available = (settings.get("by_source_type") or {}).get(source_type, [])
    return list(available[:int(settings.get("per_source", 2))])
