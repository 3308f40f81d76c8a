# orayata/tests/test_records.py
"""
Tests for generation requests, records and batch bookkeeping.
"""

import pytest

from fakes import source_payload
from orayata.services.sources import records as records_module
from orayata.services.sources import (
    BatchProgress,
    FailureReason,
    GenerationRecord,
    GenerationRequest,
    GeneratorUnavailable,
    audit_source,
)


def test_request_defaults():
    request = GenerationRequest("Shabbat", "15")
    assert request.duration_minutes == 15
    assert request.difficulty == "beginner"
    assert request.language == "both"


@pytest.mark.parametrize("kwargs", [
    {"topic": "", "duration_minutes": 15},
    {"topic": "Shabbat", "duration_minutes": 4},
    {"topic": "Shabbat", "duration_minutes": "soon"},
    {"topic": "Shabbat", "duration_minutes": 15, "difficulty": "expert"},
    {"topic": "Shabbat", "duration_minutes": 15, "language": "fr"},
])
def test_request_validation(kwargs):
    with pytest.raises(ValueError):
        GenerationRequest(**kwargs)


def test_with_topic_keeps_other_fields():
    request = GenerationRequest("Shabbat", 20, "advanced", "he")
    other = request.with_topic("halacha")
    assert other.to_dict() == {
        "topic": "halacha",
        "duration_minutes": 20,
        "difficulty": "advanced",
        "language": "he",
    }


def test_record_from_native_payload():
    payload = source_payload(
        end_ref="Genesis 1:5",
        text_excerpt_he="בראשית ברא",
        difficulty_level="beginner",
        commentaries="Rashi",
        learning_objectives=["Creation order"],
    )

    record = GenerationRecord.from_payload(payload)

    assert record.reference == "Genesis 1:1-3"
    assert record.end_reference == "Genesis 1:5"
    assert record.url == "https://www.sefaria.org/Genesis.1.1-3"
    assert record.excerpt.startswith("In the beginning")
    assert record.excerpt_he == "בראשית ברא"
    assert record.difficulty == "beginner"
    assert record.commentaries == ["Rashi"]
    assert record.learning_objectives == ["Creation order"]


def test_record_from_short_keys():
    record = GenerationRecord.from_payload({
        "title": "Rest",
        "reference": "Exodus 20:8",
        "excerpt": "Remember the sabbath day",
        "url": "https://www.sefaria.org/Exodus.20.8",
    })
    assert record.reference == "Exodus 20:8"
    assert record.url == "https://www.sefaria.org/Exodus.20.8"


def test_record_ignores_pipeline_flags_from_generator():
    record = GenerationRecord.from_payload(source_payload(link_verified=False, link_repaired=True, id="x"))
    assert record.link_verified
    assert not record.link_repaired
    assert record.id is None


def test_record_missing_fields():
    with pytest.raises(GeneratorUnavailable) as exc:
        GenerationRecord.from_payload({"title": "Only a title", "start_ref": "  "})
    assert "excerpt" in str(exc.value)
    assert "reference" in str(exc.value)


def test_record_from_non_dict():
    with pytest.raises(GeneratorUnavailable):
        GenerationRecord.from_payload(["not", "a", "record"])


def test_failure_reason_str():
    failure = FailureReason("chunk_shortfall", "Only generated 1/3 sources", 2, "Shabbat")
    assert str(failure) == "Batch 2: Only generated 1/3 sources"


def test_batch_progress_to_dict():
    progress = BatchProgress(requested=3, chunks_total=1, chunks_completed=1)
    progress.records.append(GenerationRecord.from_payload(source_payload()))
    progress.succeeded = 1
    progress.failed.append(FailureReason("generator_unavailable", "down", 1))
    progress.failed.append(FailureReason("chunk_shortfall", "Only generated 1/3 sources", 1))

    data = progress.to_dict()

    assert progress.attempts_failed == 1
    assert data["succeeded"] == 1
    assert data["errors"] == ["Batch 1: down", "Batch 1: Only generated 1/3 sources"]
    assert data["failed"][0]["kind"] == "generator_unavailable"
    assert data["sources"][0]["title"] == "The Creation"
    assert not data["cancelled"]


def test_audit_source_clean():
    row = {
        "id": "abc",
        "title": "The Creation",
        "title_he": "מעשה בראשית",
        "category": "tanakh",
        "subcategory": "weekly_portion",
        "reference": "Genesis 1:1",
        "end_reference": "Genesis 1:5",
        "url": "https://www.sefaria.org/Genesis.1.1-5",
        "reflection_prompt": "Why begin here?",
        "reflection_prompt_he": "למה להתחיל כאן?",
    }
    assert audit_source(row) == []


def test_audit_source_issues():
    row = {"id": "abc", "title": "x", "category": "Weekly Portion", "subcategory": "hilchot-deot"}

    issues = audit_source(row)

    assert issues[0]["id"] == "abc"
    assert "reference" in issues[0]["missing"]
    assert {"id": "abc", "invalid_category": "Weekly Portion"} in issues
    assert {"id": "abc", "invalid_subcategory": "hilchot-deot"} in issues


def test_request_minimum_duration_from_settings(monkeypatch):
    monkeypatch.setattr(records_module, "get_generation_settings", lambda: {"min_duration_minutes": 10})

    with pytest.raises(ValueError) as exc:
        GenerationRequest("Shabbat", 8)
    assert "10" in str(exc.value)
    assert GenerationRequest("Shabbat", 10).duration_minutes == 10


@pytest.mark.parametrize("extra", [
    {"start_ref": 123},
    {"category": ["halacha"]},
    {"title": {"en": "The Creation"}},
    {"sefaria_link": 42},
])
def test_record_rejects_non_text_fields(extra):
    with pytest.raises(GeneratorUnavailable) as exc:
        GenerationRecord.from_payload(source_payload(**extra))
    assert "non-text" in str(exc.value)


def test_record_list_fields_keep_text_items():
    record = GenerationRecord.from_payload(source_payload(
        commentaries=["Rashi", 7, None, "Ramban"],
        prerequisites="Hebrew alphabet",
    ))
    assert record.commentaries == ["Rashi", "Ramban"]
    assert record.prerequisites == ["Hebrew alphabet"]


def test_record_estimated_time():
    assert GenerationRecord.from_payload(source_payload(estimated_time="15")).estimated_time == 15
    assert GenerationRecord.from_payload(source_payload(estimated_time="soon")).estimated_time is None
    print("✓ from_payload: estimated_time coerced or dropped")
