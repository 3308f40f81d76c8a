# orayata/tests/test_generator.py
"""
Tests for the LLM-backed source generator (fake provider).
"""

import json

import pytest

from fakes import FakeProvider, source_payload
from orayata.services.sources import (
    GenerationRequest,
    LLMSourceGenerator,
    build_prompt,
    parse_json_response,
)
from orayata.services.sources import generator as generator_module


def test_build_prompt_mentions_request():
    prompt = build_prompt(GenerationRequest("Pirkei Avot", 25, "intermediate", "en"))
    assert "Topic: Pirkei Avot" in prompt
    assert "Study time: 25 minutes" in prompt
    assert "Difficulty: intermediate" in prompt
    assert '"sefaria_link"' in prompt
    assert '"estimated_time": 25' in prompt


def test_parse_plain_json():
    assert parse_json_response('{"title": "x"}') == {"title": "x"}


def test_parse_fenced_json():
    fence = "`" * 3
    response = f'{fence}json\n{{"title": "x", "start_ref": "Genesis 1:1"}}\n{fence}\nHope this helps!'
    assert parse_json_response(response) == {"title": "x", "start_ref": "Genesis 1:1"}


def test_parse_rejects_bad_json():
    with pytest.raises(ValueError):
        parse_json_response("Here is your source: Genesis 1:1")
    with pytest.raises(ValueError):
        parse_json_response('["not", "an", "object"]')
    with pytest.raises(ValueError):
        parse_json_response("")


def test_generate_calls_provider():
    provider = FakeProvider(json.dumps(source_payload()))
    generator = LLMSourceGenerator(provider=provider, model="test-model")

    payload = generator.generate(GenerationRequest("Shabbat", 15))

    assert payload["start_ref"] == "Genesis 1:1-3"
    call = provider.calls[0]
    assert call["model"] == "test-model"
    assert call["temperature"] == 0.7
    assert [m["role"] for m in call["messages"]] == ["system", "user"]
    assert "Topic: Shabbat" in call["messages"][1]["content"]


def test_generate_propagates_provider_errors():
    generator = LLMSourceGenerator(provider=FakeProvider(RuntimeError("OpenAI request failed")))
    with pytest.raises(RuntimeError):
        generator.generate(GenerationRequest("Shabbat", 15))


def test_generate_without_provider(monkeypatch):
    monkeypatch.setattr(generator_module, "get_best_available_client", lambda: None)
    with pytest.raises(RuntimeError) as exc:
        LLMSourceGenerator().generate(GenerationRequest("Shabbat", 15))
    assert "No LLM provider" in str(exc.value)
