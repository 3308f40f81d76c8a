# orayata/tests/test_reference_parser.py
"""
Tests for citation parsing.
"""

import pytest

from orayata.services.references import (
    TextReference,
    is_compound_code,
    parse_reference,
)


@pytest.mark.parametrize("text,work,locator", [
    ("Genesis 1:1-3", "Genesis", "1:1-3"),
    ("Pirkei Avot 2:4", "Pirkei Avot", "2:4"),
    ("Mishneh Torah, Hilchot Deot 1:1-5", "Mishneh Torah, Hilchot Deot", "1:1-5"),
    ("Berakhot 2a", "Berakhot", "2a"),
    ("1 Samuel 3:1", "1 Samuel", "3:1"),
    ("Berakhot", "Berakhot", None),
])
def test_parse_reference(text, work, locator):
    ref = parse_reference(text)
    assert ref.work == work
    assert ref.locator == locator


def test_parse_reference_joins_locator_tokens_with_dots():
    assert parse_reference("Genesis 1 1").locator == "1.1"


def test_parse_reference_dotted_path():
    """A single dotted token is read as a Sefaria path."""
    assert parse_reference("Genesis.1.1-3") == TextReference("Genesis", "1.1-3")


def test_parse_reference_empty():
    assert parse_reference("") is None
    assert parse_reference("   ") is None
    assert parse_reference(None) is None


def test_from_path():
    assert TextReference.from_path("Genesis.1:1-3") == TextReference("Genesis", "1:1-3")
    assert TextReference.from_path("Pirkei_Avot.2.4") == TextReference("Pirkei Avot", "2.4")

    ref = TextReference.from_path("Mishneh_Torah,_Hilchot_Deot.1:1-5")
    assert ref == TextReference("Mishneh Torah, Hilchot Deot", "1:1-5")

    # Dotted title segments are rejoined with spaces
    ref = TextReference.from_path("Mishneh_Torah,_Hilchot.Deot.1.1-5")
    assert ref == TextReference("Mishneh Torah, Hilchot Deot", "1.1-5")

    assert TextReference.from_path("/") is None


def test_text_and_compound():
    ref = TextReference("Mishneh Torah, Hilchot Deot", "1:1-5")
    assert ref.text == "Mishneh Torah, Hilchot Deot 1:1-5"
    assert ref.is_compound
    assert TextReference("Berakhot").text == "Berakhot"
    assert not TextReference("Genesis", "1:1").is_compound


def test_is_compound_code():
    assert is_compound_code("Mishneh Torah, Hilchot Deot 1:1")
    assert is_compound_code("mishneh  torah, Hilchot Teshuva")
    assert not is_compound_code("Mishneh.Torah,.Hilchot.Deot")
    assert not is_compound_code("Genesis 1:1")
