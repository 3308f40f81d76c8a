# orayata/services/sources/pipeline.py
"""
Source Generation Pipeline

Drives AI-generated study sources from request to accepted record.

Pipeline flow for one source:
1. Ask the generator for a record (check required and text fields)
2. Canonicalize the record's Sefaria link (rebuild from the reference
   if the link is malformed)
3. Probe the catalogue
4. On an invalid link, repair once and probe again
5. Accept (and store), or reject

Each attempt runs at most two canonicalize/probe rounds: the original
link and one repair. An unreachable catalogue never blocks a source;
the record is accepted with link_verified=False.
"""

import logging
from typing import Callable, Optional, Sequence

from orayata.core.config import get_chunk_size
from orayata.services.references import (
    CanonicalUrl,
    MalformedReference,
    SefariaClient,
    TextReference,
    normalize,
    parse_reference,
    repair,
)

from .commentaries import select_commentaries
from .generator import LLMSourceGenerator, SourceGenerator
from .records import (
    BatchProgress,
    FailureReason,
    GenerationRecord,
    GenerationRequest,
    GeneratorUnavailable,
    SourceGenerationError,
    UnrepairableReference,
)
from .storage import SourceStore
from .topics import normalize_topic

logger = logging.getLogger(__name__)


ProgressObserver = Callable[[float, BatchProgress], None]


class SourcePipeline:
    """
    Generate -> canonicalize -> validate -> repair-or-reject.

    Usage:
        pipeline = SourcePipeline(store=SQLiteSourceStore())

        record = pipeline.generate_one(GenerationRequest("Shabbat", 15))
        print(record.url, record.link_verified)

        progress = pipeline.generate_batch(
            GenerationRequest("Rambam", 20),
            count=10,
            observer=lambda fraction, p: print(f"{fraction:.0%}"),
        )
        print(progress.succeeded, [str(f) for f in progress.failed])
    """

    def __init__(
        self,
        generator: Optional[SourceGenerator] = None,
        validator: Optional[SefariaClient] = None,
        store: Optional[SourceStore] = None,
        chunk_size: Optional[int] = None,
    ):
        self.generator = generator or LLMSourceGenerator()
        self.validator = validator or SefariaClient()
        self.store = store
        self.chunk_size = chunk_size if chunk_size is not None else get_chunk_size()
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")

    # ------------------------------------------------------------------
    # Single source
    # ------------------------------------------------------------------

    def generate_one(
        self,
        request: GenerationRequest,
        fallback_topics: Optional[Sequence[str]] = None,
    ) -> GenerationRecord:
        """
        Generate, validate and accept one source.

        Fallback topics are tried in order, and only when the generator
        is unavailable for the previous topic.

        Raises:
            GeneratorUnavailable: If the generator failed for every topic
            UnrepairableReference: If the link is still invalid after repair
        """
        topics = [request.topic] + [t for t in (fallback_topics or []) if t]
        last_error = None

        for i, topic in enumerate(topics):
            attempt = request if i == 0 else request.with_topic(topic)
            try:
                record = self._request_record(attempt)
            except GeneratorUnavailable as e:
                last_error = e
                if i + 1 < len(topics):
                    logger.warning(f"Generator unavailable for {topic!r}, trying {topics[i + 1]!r}")
                continue

            self._resolve_link(record)

            if self.store is not None:
                record.id = self.store.save(record)

            logger.info(
                f"Accepted source {record.title!r} ({record.url}"
                f"{', unverified' if not record.link_verified else ''})"
            )
            return record

        raise last_error

    def _request_record(self, request: GenerationRequest) -> GenerationRecord:
        try:
            payload = self.generator.generate(request)
        except Exception as e:
            logger.error(f"Generator failed for topic {request.topic!r}: {e}")
            raise GeneratorUnavailable(str(e)) from e

        record = GenerationRecord.from_payload(payload)
        record.category = normalize_topic(record.category or request.topic)
        record.difficulty = record.difficulty or request.difficulty
        record.language = record.language or request.language
        if not record.commentaries:
            record.commentaries = select_commentaries(
                request.topic, record.title, record.reference, record.excerpt
            )
        return record

    def _repair(self, record: GenerationRecord, reference: Optional[TextReference]) -> CanonicalUrl:
        if reference is None:
            raise UnrepairableReference(f"No reference to rebuild link for {record.title!r}")
        try:
            return repair(reference)
        except MalformedReference as e:
            raise UnrepairableReference(f"Could not rebuild link from {reference.text!r}: {e}") from e

    def _resolve_link(self, record: GenerationRecord) -> None:
        """Canonicalize and validate record.url in place, repairing at most once."""
        reference = parse_reference(record.reference)
        repaired = False

        try:
            url = normalize(record.url)
        except MalformedReference:
            logger.warning(f"Malformed link {record.url!r}, rebuilding from {record.reference!r}")
            url = self._repair(record, reference)
            repaired = True

        outcome = self.validator.check_reachable(url)

        if outcome.is_invalid:
            if repaired:
                raise UnrepairableReference(f"Rebuilt link {url} rejected: {outcome.reason}")
            logger.warning(f"Link {url} rejected ({outcome.reason}), attempting repair")
            url = self._repair(record, reference)
            repaired = True
            outcome = self.validator.check_reachable(url)
            if outcome.is_invalid:
                raise UnrepairableReference(f"Repaired link {url} rejected: {outcome.reason}")

        if outcome.is_unreachable:
            logger.warning(f"Catalogue unreachable ({outcome.reason}), accepting {url} unverified")

        record.url = url
        record.link_repaired = repaired
        record.link_verified = outcome.is_valid

    # ------------------------------------------------------------------
    # Bulk generation
    # ------------------------------------------------------------------

    def generate_batch(
        self,
        request: GenerationRequest,
        count: int,
        observer: Optional[ProgressObserver] = None,
        cancel_event=None,
        fallback_topics: Optional[Sequence[str]] = None,
    ) -> BatchProgress:
        """
        Generate count sources in fixed-size chunks.

        Attempts run sequentially. A failed attempt is recorded and the
        batch moves on; chunks are never retried. After every chunk the
        observer receives chunks_completed / chunks_total. cancel_event
        (anything with is_set()) is checked between chunks only.

        Never raises: every failure ends up in BatchProgress.failed. A
        count that is not a number yields an empty batch.
        """
        try:
            count = int(count)
        except (TypeError, ValueError):
            logger.error(f"Invalid batch count {count!r}")
            return BatchProgress(requested=0)

        progress = BatchProgress(requested=max(count, 0))
        if count <= 0:
            return progress

        progress.chunks_total = -(-count // self.chunk_size)
        logger.info(
            f"Starting batch of {count} sources for {request.topic!r} "
            f"in {progress.chunks_total} chunk(s)"
        )

        for index in range(progress.chunks_total):
            if cancel_event is not None and cancel_event.is_set():
                progress.cancelled = True
                logger.info(f"Batch cancelled after {progress.chunks_completed} chunk(s)")
                break

            chunk_number = index + 1
            size = min(self.chunk_size, count - index * self.chunk_size)
            produced = self._run_chunk(request, size, chunk_number, progress, fallback_topics)

            if produced < size:
                progress.failed.append(FailureReason(
                    kind="chunk_shortfall",
                    detail=f"Only generated {produced}/{size} sources",
                    chunk=chunk_number,
                    topic=request.topic,
                ))

            progress.chunks_completed += 1
            self._notify(observer, progress)

        logger.info(
            f"Batch finished: {progress.succeeded}/{progress.requested} generated, "
            f"{progress.attempts_failed} failed"
        )
        return progress

    def _run_chunk(
        self,
        request: GenerationRequest,
        size: int,
        chunk_number: int,
        progress: BatchProgress,
        fallback_topics: Optional[Sequence[str]],
    ) -> int:
        produced = 0
        for _ in range(size):
            try:
                record = self.generate_one(request, fallback_topics)
            except SourceGenerationError as e:
                progress.failed.append(FailureReason(e.kind, str(e), chunk_number, request.topic))
                continue
            except Exception as e:
                logger.exception(f"Unexpected error in batch {chunk_number}")
                progress.failed.append(FailureReason("unexpected_error", str(e), chunk_number, request.topic))
                continue

            produced += 1
            progress.succeeded += 1
            progress.records.append(record)
        return produced

    def _notify(self, observer: Optional[ProgressObserver], progress: BatchProgress) -> None:
        if observer is None:
            return
        try:
            observer(progress.fraction_complete, progress)
        except Exception:
            logger.exception("Progress observer failed")


# Singleton
_pipeline = None

def get_pipeline() -> SourcePipeline:
    """Get or create singleton pipeline."""
    global _pipeline
    if _pipeline is None:
        from .storage import SQLiteSourceStore
        _pipeline = SourcePipeline(store=SQLiteSourceStore())
    return _pipeline
