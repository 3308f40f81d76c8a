"""
AI Source Generation

Generate -> canonicalize -> validate -> repair-or-reject for Torah
study sources.

Example:
    from orayata.services.sources import GenerationRequest, get_pipeline

    record = get_pipeline().generate_one(GenerationRequest("Shabbat", 15))
    print(record.url)
"""

from .records import (
    DIFFICULTIES,
    LANGUAGES,
    REQUIRED_FIELDS,
    SourceGenerationError,
    GeneratorUnavailable,
    UnrepairableReference,
    GenerationRequest,
    GenerationRecord,
    FailureReason,
    BatchProgress,
    audit_source,
)

from .topics import (
    normalize_topic,
    related_topics,
    fallback_topics_for,
)

from .commentaries import (
    identify_source_type,
    select_commentaries,
)

from .generator import (
    SourceGenerator,
    LLMSourceGenerator,
    build_prompt,
    parse_json_response,
)

from .storage import (
    SourceStore,
    SQLiteSourceStore,
)

from .pipeline import (
    SourcePipeline,
    get_pipeline,
)

__all__ = [
    # Records
    'DIFFICULTIES',
    'LANGUAGES',
    'REQUIRED_FIELDS',
    'SourceGenerationError',
    'GeneratorUnavailable',
    'UnrepairableReference',
    'GenerationRequest',
    'GenerationRecord',
    'FailureReason',
    'BatchProgress',
    'audit_source',

    # Topics
    'normalize_topic',
    'related_topics',
    'fallback_topics_for',

    # Commentaries
    'identify_source_type',
    'select_commentaries',

    # Generators
    'SourceGenerator',
    'LLMSourceGenerator',
    'build_prompt',
    'parse_json_response',

    # Storage
    'SourceStore',
    'SQLiteSourceStore',

    # Pipeline (main entry)
    'SourcePipeline',
    'get_pipeline',
]
