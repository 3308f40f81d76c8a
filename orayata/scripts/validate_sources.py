#!/usr/bin/env python3
"""
Audit stored sources for missing fields and malformed slugs.

Exits nonzero if problems found.

Usage:
    python -m orayata.scripts.validate_sources
    python -m orayata.scripts.validate_sources --db /path/to/orayata_sources.db
    python -m orayata.scripts.validate_sources --file sources.json
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List

from orayata.services.sources import SQLiteSourceStore, audit_source

logger = logging.getLogger(__name__)


def load_rows(args) -> List[Dict[str, Any]]:
    if args.file:
        with open(args.file, "r", encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data.get("sources", [])
        return data
    return SQLiteSourceStore(args.db).list_sources()


def main():
    parser = argparse.ArgumentParser(description="Audit stored study sources")
    parser.add_argument("--db", default=None, help="SQLite database path (default: ORAYATA_DB)")
    parser.add_argument("--file", default=None, help="Audit a JSON export instead of the database")
    parser.add_argument("--json", action="store_true", help="Print issues as JSON")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        rows = load_rows(args)
    except (OSError, ValueError) as e:
        print(f"Error: could not load sources: {e}", file=sys.stderr)
        return 2

    issues = []
    for row in rows:
        issues.extend(audit_source(row))

    logger.info(f"Audited {len(rows)} source(s), {len(issues)} issue(s)")

    if args.json:
        print(json.dumps(issues, ensure_ascii=False, indent=2))
    elif issues:
        print(f"Found {len(issues)} issue(s):")
        for issue in issues:
            print(f"  - {issue}")
    else:
        print("All sources look good.")

    return 1 if issues else 0


if __name__ == "__main__":
    sys.exit(main())
