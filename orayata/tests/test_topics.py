# orayata/tests/test_topics.py
"""
Tests for topic slugs and related-topic lookup.
"""

from orayata.services.sources import fallback_topics_for, normalize_topic, related_topics


def test_normalize_topic():
    assert normalize_topic("Weekly Portion") == "weekly_portion"
    assert normalize_topic("hilchot-deot") == "hilchot_deot"
    assert normalize_topic("Maimonides") == "rambam"
    assert normalize_topic("Halakhah") == "halacha"
    assert normalize_topic("  Shabbat ") == "shabbat"


def test_related_topics_for_main_topic():
    assert related_topics("halacha") == ["kashrut", "shabbat", "daily_practice"]
    assert related_topics("Maimonides") == ["hilchot_deot", "hilchot_teshuva"]


def test_related_topics_for_subtopic_lists_parent_first():
    assert related_topics("Shabbat") == ["halacha", "kashrut", "daily_practice"]
    assert related_topics("mussar") == ["spiritual", "chassidut", "jewish_philosophy"]


def test_related_topics_unknown():
    assert related_topics("astronomy") == []


def test_fallback_topics_exclude_self():
    assert fallback_topics_for("Shabbat") == ["halacha", "kashrut", "daily_practice"]
    assert "surprise" not in fallback_topics_for("surprise")
    assert fallback_topics_for("surprise")[0] == "halacha"
