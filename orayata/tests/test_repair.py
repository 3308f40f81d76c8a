# orayata/tests/test_repair.py
"""
Tests for the best-effort link repair.
"""

import pytest

from orayata.services.references import (
    MalformedReference,
    TextReference,
    normalize,
    parse_reference,
    repair,
)


def test_repair_dots_whitespace_and_colon():
    assert repair(TextReference("Genesis", "1:1-3")) == "https://www.sefaria.org/Genesis.1.1-3"
    assert repair(parse_reference("Pirkei Avot 2:4")) == "https://www.sefaria.org/Pirkei.Avot.2.4"


def test_repair_only_replaces_first_colon():
    assert repair(TextReference("Genesis", "1:1:3")) == "https://www.sefaria.org/Genesis.1.1%3A3"


def test_repair_does_not_format_compound_codes():
    """Repair dots the whole compound title; only the code name is restored."""
    ref = parse_reference("Mishneh Torah, Hilchot Deot 1:1-5")
    url = repair(ref)
    assert url == "https://www.sefaria.org/Mishneh_Torah%2C_Hilchot.Deot.1.1-5"


def test_repaired_links_are_canonical():
    for text in ("Genesis 1:1-3", "Mishneh Torah, Hilchot Deot 1:1-5", "Pirkei Avot 2:4"):
        url = repair(parse_reference(text))
        assert normalize(url) == url


def test_repair_rejects_empty_reference():
    with pytest.raises(MalformedReference):
        repair(TextReference("   "))
