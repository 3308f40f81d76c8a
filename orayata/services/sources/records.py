# orayata/services/sources/records.py
"""
Data types for AI source generation.

- GenerationRequest: what to ask the generator for
- GenerationRecord: one generated source, checked for required fields
- FailureReason / BatchProgress: bookkeeping for bulk runs
- Error hierarchy for a single generation attempt
"""

import re
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from orayata.core.config import get_generation_settings


DIFFICULTIES = ("beginner", "intermediate", "advanced")
LANGUAGES = ("en", "he", "both")

# Presence-checked at the pipeline boundary
REQUIRED_FIELDS = ("title", "excerpt", "reference")

# Fields a stored source must carry (audited by scripts/validate_sources.py)
STORED_REQUIRED_FIELDS = (
    "title",
    "title_he",
    "category",
    "reference",
    "end_reference",
    "url",
    "reflection_prompt",
    "reflection_prompt_he",
)

_SLUG_PATTERN = re.compile(r'^[a-z_]+$')


class SourceGenerationError(Exception):
    """Base exception for a failed generation attempt."""
    kind = "generation_error"


class GeneratorUnavailable(SourceGenerationError):
    """Raised when the generator fails or returns an incomplete record."""
    kind = "generator_unavailable"


class UnrepairableReference(SourceGenerationError):
    """Raised when a record's link stays invalid after the single repair pass."""
    kind = "unrepairable_reference"


@dataclass
class GenerationRequest:
    """
    A request for one generated source.

    Raises ValueError on construction if any field is out of range.
    """
    topic: str
    duration_minutes: int
    difficulty: str = "beginner"
    language: str = "both"

    def __post_init__(self):
        if not self.topic or not str(self.topic).strip():
            raise ValueError("topic is required")
        try:
            self.duration_minutes = int(self.duration_minutes)
        except (TypeError, ValueError):
            raise ValueError(f"duration_minutes must be a number, got {self.duration_minutes!r}")
        min_minutes = int(get_generation_settings().get("min_duration_minutes", 5))
        if self.duration_minutes < min_minutes:
            raise ValueError(f"duration_minutes must be at least {min_minutes}")
        if self.difficulty not in DIFFICULTIES:
            raise ValueError(f"difficulty must be one of {', '.join(DIFFICULTIES)}")
        if self.language not in LANGUAGES:
            raise ValueError(f"language must be one of {', '.join(LANGUAGES)}")

    def with_topic(self, topic: str) -> "GenerationRequest":
        """Copy of this request for a different topic."""
        return GenerationRequest(topic, self.duration_minutes, self.difficulty, self.language)

    def to_dict(self) -> dict:
        return asdict(self)


# Generator payload key -> record field. Short keys win over long ones.
_PAYLOAD_ALIASES = {
    "url": ("url", "sefaria_link"),
    "reference": ("reference", "start_ref"),
    "end_reference": ("end_reference", "end_ref"),
    "excerpt": ("excerpt", "text_excerpt", "translation"),
    "excerpt_he": ("excerpt_he", "text_excerpt_he"),
    "difficulty": ("difficulty", "difficulty_level"),
    "language": ("language", "language_preference"),
}

_LIST_FIELDS = ("commentaries", "learning_objectives", "prerequisites")
_PIPELINE_FIELDS = ("link_verified", "link_repaired", "id")


@dataclass
class GenerationRecord:
    """
    A generated study source.

    Pipeline flags:
        link_verified: False if the catalogue could not be reached
        link_repaired: True if the link was rebuilt from the reference
        id: Assigned by the store once persisted
    """
    title: str
    reference: str
    excerpt: str
    url: str = ""
    title_he: str = ""
    end_reference: str = ""
    excerpt_he: str = ""
    reflection_prompt: str = ""
    reflection_prompt_he: str = ""
    category: str = ""
    subcategory: str = ""
    source_type: str = "text_study"
    commentaries: List[str] = field(default_factory=list)
    learning_objectives: List[str] = field(default_factory=list)
    prerequisites: List[str] = field(default_factory=list)
    estimated_time: Optional[int] = None
    difficulty: str = ""
    language: str = ""
    link_verified: bool = True
    link_repaired: bool = False
    id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "GenerationRecord":
        """
        Build a record from a generator payload.

        Accepts both the generator's native keys (sefaria_link, start_ref,
        text_excerpt, ...) and the short keys (url, reference, excerpt).

        Text fields must be strings. List fields keep their string items;
        a bare string becomes a one-item list. A non-numeric estimated_time
        is dropped.

        Raises:
            GeneratorUnavailable: If the payload is not a dict, lacks a
                                  required field, or has a non-string
                                  text field
        """
        if not isinstance(payload, dict):
            raise GeneratorUnavailable(f"Generator returned {type(payload).__name__}, not a record")

        values = {}
        for name in cls.__dataclass_fields__:
            # Flags and ids belong to the pipeline, not the generator
            if name in _PIPELINE_FIELDS:
                continue
            keys = _PAYLOAD_ALIASES.get(name, (name,))
            for key in keys:
                if payload.get(key) not in (None, ""):
                    values[name] = payload[key]
                    break

        for name in _LIST_FIELDS:
            if name in values:
                items = values[name] if isinstance(values[name], list) else [values[name]]
                values[name] = [item for item in items if isinstance(item, str)]

        if "estimated_time" in values:
            try:
                values["estimated_time"] = int(values["estimated_time"])
            except (TypeError, ValueError):
                del values["estimated_time"]

        wrong_type = [
            name for name, value in values.items()
            if name not in _LIST_FIELDS and name != "estimated_time" and not isinstance(value, str)
        ]
        if wrong_type:
            raise GeneratorUnavailable(f"Generator record has non-text fields: {', '.join(wrong_type)}")

        missing = [f for f in REQUIRED_FIELDS if not values.get(f, "").strip()]
        if missing:
            raise GeneratorUnavailable(f"Generator record missing required fields: {', '.join(missing)}")

        return cls(**values)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass
class FailureReason:
    """
    One failure recorded during a bulk run.

    kind is one of: generator_unavailable, unrepairable_reference,
    unexpected_error, chunk_shortfall.
    """
    kind: str
    detail: str
    chunk: int
    topic: Optional[str] = None

    def __str__(self) -> str:
        return f"Batch {self.chunk}: {self.detail}"


@dataclass
class BatchProgress:
    """Counters for one generate_batch call. Returned to the caller, not retained."""
    requested: int
    succeeded: int = 0
    failed: List[FailureReason] = field(default_factory=list)
    records: List[GenerationRecord] = field(default_factory=list)
    chunks_total: int = 0
    chunks_completed: int = 0
    cancelled: bool = False

    @property
    def attempts_failed(self) -> int:
        """Number of individual attempts that failed (chunk diagnostics excluded)."""
        return sum(1 for f in self.failed if f.kind != "chunk_shortfall")

    @property
    def fraction_complete(self) -> float:
        if not self.chunks_total:
            return 1.0
        return self.chunks_completed / self.chunks_total

    def to_dict(self) -> dict:
        return {
            "requested": self.requested,
            "succeeded": self.succeeded,
            "failed": [asdict(f) for f in self.failed],
            "errors": [str(f) for f in self.failed],
            "chunks_total": self.chunks_total,
            "chunks_completed": self.chunks_completed,
            "cancelled": self.cancelled,
            "sources": [r.to_dict() for r in self.records],
        }


def audit_source(row: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Check a stored source for missing fields and malformed slugs.

    Returns:
        List of issue dicts, empty if the source looks good
    """
    issues = []

    missing = [f for f in STORED_REQUIRED_FIELDS if not row.get(f)]
    if missing:
        issues.append({"id": row.get("id"), "missing": missing})

    category = row.get("category")
    if category and not _SLUG_PATTERN.match(category):
        issues.append({"id": row.get("id"), "invalid_category": category})

    subcategory = row.get("subcategory")
    if subcategory and not _SLUG_PATTERN.match(subcategory):
        issues.append({"id": row.get("id"), "invalid_subcategory": subcategory})

    return issues
