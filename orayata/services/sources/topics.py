# orayata/services/sources/topics.py
"""
Topic slugs and related-topic lookup.

Used to pick fallback topics when the generator cannot produce a
source for the topic the learner asked for.
"""

import re
from typing import List

from orayata.core.config import (
    get_topic_aliases,
    get_topic_relations,
    get_subcategory_relations,
)


def normalize_topic(topic: str) -> str:
    """
    Convert a topic label to its slug.

    "Weekly Portion" -> "weekly_portion", "Maimonides" -> "rambam"
    """
    slug = re.sub(r'[\s-]+', '_', (topic or "").strip().lower())
    return get_topic_aliases().get(slug, slug)


def related_topics(topic: str) -> List[str]:
    """
    Get topics related to a topic or subcategory.

    Main topics return their subtopics. Subtopics return their parent
    topic first, followed by their siblings.
    """
    slug = normalize_topic(topic)
    relations = get_topic_relations()
    sub_relations = get_subcategory_relations()

    if slug in relations:
        return list(relations[slug])

    related = list(sub_relations.get(slug, []))
    for category, subs in relations.items():
        if slug in subs:
            return [category] + [t for t in related if t != category]

    return related


def fallback_topics_for(topic: str) -> List[str]:
    """Related topics to try, in order, excluding the topic itself."""
    slug = normalize_topic(topic)
    return [t for t in related_topics(topic) if t != slug]
