# routes/sources_api.py
"""
API endpoints for AI source generation and Sefaria link handling.

Provides access to:
- Source generation (single source or a chunked batch)
- Sefaria link inspection (canonical form, reference, catalogue status)
- Canonical link building from a citation
"""

import logging

from flask import Blueprint, current_app, request, jsonify

from orayata.core.config import get_generation_settings
from orayata.services.references import (
    MalformedReference,
    SefariaClient,
    build_url,
    extract_reference,
    is_recognized_url,
    normalize,
)
from orayata.services.sources import (
    GenerationRequest,
    GeneratorUnavailable,
    SourcePipeline,
    UnrepairableReference,
    fallback_topics_for,
    get_pipeline,
)
from orayata.utils.errors import (
    generator_unavailable,
    invalid_field,
    malformed_reference,
    missing_field,
    server_error,
    unrepairable_reference,
)

logger = logging.getLogger(__name__)

sources_bp = Blueprint("sources_api", __name__, url_prefix="/api/sources")


def _pipeline() -> SourcePipeline:
    """App-configured pipeline (tests inject one), else the shared singleton."""
    return current_app.config.get("SOURCE_PIPELINE") or get_pipeline()


def _validator() -> SefariaClient:
    return _pipeline().validator


# =============================================================================
# Generation Endpoints
# =============================================================================

@sources_bp.post("/generate")
def generate_sources():
    """
    Generate one or more study sources.

    Request body:
        {
            "topic": "Shabbat",
            "timeMinutes": 15,
            "difficulty": "beginner",      (optional)
            "language": "both",            (optional)
            "count": 1,                    (optional)
            "saveToDatabase": true,        (optional, default true)
            "useRelatedTopics": false      (optional)
        }

    Returns (count == 1):
        {"success": true, "sources": [...], "count": 1}

    Returns (count > 1):
        {"success": true, "requested": 5, "succeeded": 4, "errors": [...], ...}
    """
    data = request.get_json(silent=True) or {}

    topic = data.get("topic")
    if not topic:
        return missing_field("topic")

    minutes = data.get("timeMinutes", data.get("durationMinutes"))
    if minutes is None:
        return missing_field("timeMinutes")

    settings = get_generation_settings()

    try:
        gen_request = GenerationRequest(
            topic=topic,
            duration_minutes=minutes,
            difficulty=data.get("difficulty") or settings["default_difficulty"],
            language=data.get("language") or settings["default_language"],
        )
    except ValueError as e:
        return invalid_field("request", str(e))

    try:
        count = int(data.get("count", 1))
    except (TypeError, ValueError):
        return invalid_field("count", "count must be a number")
    if count < 1 or count > settings["max_count"]:
        return invalid_field("count", f"count must be between 1 and {settings['max_count']}")

    pipeline = _pipeline()
    fallback_topics = fallback_topics_for(topic) if data.get("useRelatedTopics") else None

    # saveToDatabase=false runs the pipeline without its store
    save = data.get("saveToDatabase", True)
    if not save and pipeline.store is not None:
        pipeline = SourcePipeline(
            generator=pipeline.generator,
            validator=pipeline.validator,
            chunk_size=pipeline.chunk_size,
        )

    if count == 1:
        try:
            record = pipeline.generate_one(gen_request, fallback_topics)
        except GeneratorUnavailable as e:
            return generator_unavailable(str(e))
        except UnrepairableReference as e:
            return unrepairable_reference(str(e))
        except Exception as e:
            logger.exception("Source generation failed")
            return server_error("generation_failed", str(e))

        return jsonify({"success": True, "sources": [record.to_dict()], "count": 1})

    progress = pipeline.generate_batch(gen_request, count, fallback_topics=fallback_topics)
    result = progress.to_dict()
    result["success"] = progress.succeeded > 0
    return jsonify(result)


# =============================================================================
# Link Endpoints
# =============================================================================

@sources_bp.get("/link")
def inspect_link():
    """
    Inspect a Sefaria link.

    Query params:
        url: Link to inspect (required)
        check: Probe the catalogue (optional, default true)

    Returns:
        {
            "url": "https://www.sefaria.org.il/Genesis.1.1-3",
            "recognized": true,
            "canonical": "https://www.sefaria.org/Genesis.1.1-3",
            "reference": {"work": "Genesis", "locator": "1.1-3", "text": "Genesis 1.1-3"},
            "validation": {"status": "valid", ...}
        }
    """
    url = request.args.get("url")
    if not url:
        return missing_field("url")

    if not is_recognized_url(url):
        return jsonify({"url": url, "recognized": False}), 200

    canonical = normalize(url)
    reference = extract_reference(canonical)

    result = {
        "url": url,
        "recognized": True,
        "canonical": canonical,
        "reference": None,
    }
    if reference is not None:
        result["reference"] = {
            "work": reference.work,
            "locator": reference.locator,
            "text": reference.text,
        }

    if request.args.get("check", "true").lower() != "false":
        result["validation"] = _validator().check_reachable(canonical).to_dict()

    return jsonify(result)


@sources_bp.get("/build")
def build_link():
    """
    Build a canonical Sefaria link from a citation.

    Query params:
        ref: Citation (required) e.g., "Mishneh Torah, Hilchot Deot 1:1-5"
        lang: "he" or "en" (optional)
        layout: "hebrew" or "english" (optional)
        with: Comma-separated commentaries (optional) e.g., "Rashi,Ramban"

    Returns:
        {"ref": "...", "url": "https://www.sefaria.org/..."}
    """
    ref = request.args.get("ref")
    if ref is None:
        return missing_field("ref")

    options = {
        "language": request.args.get("lang"),
        "layout": request.args.get("layout"),
    }
    with_ = request.args.get("with")
    if with_:
        options["with"] = [c.strip() for c in with_.split(",") if c.strip()]

    try:
        url = build_url(ref, options)
    except MalformedReference as e:
        return malformed_reference(str(e))

    return jsonify({"ref": ref, "url": url})
