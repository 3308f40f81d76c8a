#!/usr/bin/env python3
"""
Generate AI study sources from the command line.

Each source runs through the full pipeline: generate, canonicalize the
Sefaria link, probe the catalogue, repair once if rejected.

Usage:
    python -m orayata.scripts.generate_sources --topic Shabbat --minutes 15
    python -m orayata.scripts.generate_sources --topic Rambam --minutes 20 --count 10
    python -m orayata.scripts.generate_sources --topic mussar --minutes 10 --related

Examples:
    # One beginner source, stored in the default database
    python -m orayata.scripts.generate_sources --topic Shabbat --minutes 15

    # A batch of advanced sources, printed but not stored
    python -m orayata.scripts.generate_sources --topic Talmud --minutes 30 \\
        --difficulty advanced --count 6 --no-save
"""

import argparse
import json
import logging
import sys

from orayata.services.sources import (
    DIFFICULTIES,
    LANGUAGES,
    GenerationRequest,
    SourceGenerationError,
    SourcePipeline,
    SQLiteSourceStore,
    fallback_topics_for,
)


def print_progress(fraction: float, progress) -> None:
    """Print batch progress bar."""
    bar_length = 30
    filled = int(bar_length * fraction)
    bar = "=" * filled + "-" * (bar_length - filled)
    print(
        f"\r    [{bar}] {fraction * 100:.1f}% ({progress.succeeded}/{progress.requested})",
        end="",
        flush=True,
    )


def main():
    parser = argparse.ArgumentParser(
        description="Generate Torah study sources with AI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m orayata.scripts.generate_sources --topic Shabbat --minutes 15
  python -m orayata.scripts.generate_sources --topic Rambam --minutes 20 --count 10
  python -m orayata.scripts.generate_sources --topic mussar --minutes 10 --related
        """
    )
    parser.add_argument("--topic", required=True, help="Topic or subcategory (e.g., Shabbat)")
    parser.add_argument("--minutes", type=int, required=True, help="Study time in minutes (>= 5)")
    parser.add_argument("--difficulty", choices=DIFFICULTIES, default="beginner")
    parser.add_argument("--language", choices=LANGUAGES, default="both")
    parser.add_argument("--count", type=int, default=1, help="Number of sources to generate")
    parser.add_argument("--db", default=None, help="SQLite database path (default: ORAYATA_DB)")
    parser.add_argument("--no-save", action="store_true", help="Do not store accepted sources")
    parser.add_argument(
        "--related",
        action="store_true",
        help="Fall back to related topics when the generator fails"
    )
    parser.add_argument("--json", action="store_true", help="Print accepted sources as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        request = GenerationRequest(args.topic, args.minutes, args.difficulty, args.language)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    store = None if args.no_save else SQLiteSourceStore(args.db)
    pipeline = SourcePipeline(store=store)
    fallback_topics = fallback_topics_for(args.topic) if args.related else None

    print(f"Generating {args.count} source(s) on {args.topic!r} ({args.minutes} min)")
    print("-" * 40)

    if args.count == 1:
        try:
            record = pipeline.generate_one(request, fallback_topics)
        except SourceGenerationError as e:
            print(f"  ✗ failed - {e}")
            return 1
        records = [record]
        failures = []
    else:
        progress = pipeline.generate_batch(
            request,
            args.count,
            observer=print_progress,
            fallback_topics=fallback_topics,
        )
        print()
        records = progress.records
        failures = progress.failed

    for record in records:
        flag = "" if record.link_verified else " (unverified)"
        repaired = " [repaired]" if record.link_repaired else ""
        print(f"  ✓ {record.title}: {record.url}{flag}{repaired}")
    for failure in failures:
        print(f"  ✗ {failure}")

    if args.json:
        print(json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2))

    # Summary
    print("-" * 40)
    print(f"Generated: {len(records)}, Failed: {len([f for f in failures if f.kind != 'chunk_shortfall'])}")

    return 0 if records else 1


if __name__ == "__main__":
    sys.exit(main())
