# orayata/services/sources/storage.py
"""
Persistence for accepted sources.

The pipeline only needs save(record) -> id. SQLiteSourceStore keeps the
canonical link and flags in columns and the full record as JSON.
"""

import json
import logging
import sqlite3
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from orayata.core.config import get_db_path

from .records import GenerationRecord

logger = logging.getLogger(__name__)


class SourceStore(ABC):
    """Destination for accepted records."""

    @abstractmethod
    def save(self, record: GenerationRecord) -> str:
        """Store a record and return its id."""
        pass

    @abstractmethod
    def list_sources(self) -> List[Dict[str, Any]]:
        """Return all stored sources as dicts."""
        pass


class SQLiteSourceStore(SourceStore):
    """
    SQLite-backed source store.

    Usage:
        store = SQLiteSourceStore("/tmp/sources.db")
        source_id = store.save(record)
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or get_db_path()
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        conn = self._connect()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS sources (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    category TEXT,
                    start_ref TEXT NOT NULL,
                    sefaria_link TEXT NOT NULL,
                    link_verified INTEGER NOT NULL DEFAULT 1,
                    link_repaired INTEGER NOT NULL DEFAULT 0,
                    payload_json TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                """
            )
            conn.commit()
        finally:
            conn.close()

    def save(self, record: GenerationRecord) -> str:
        source_id = record.id or str(uuid.uuid4())
        now = datetime.now().isoformat()
        payload = record.to_dict()
        payload["id"] = source_id

        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT INTO sources (
                    id, title, category, start_ref, sefaria_link,
                    link_verified, link_repaired, payload_json,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    source_id,
                    record.title,
                    record.category,
                    record.reference,
                    record.url,
                    int(record.link_verified),
                    int(record.link_repaired),
                    json.dumps(payload, ensure_ascii=False),
                    now,
                    now,
                ),
            )
            conn.commit()
        finally:
            conn.close()

        logger.debug(f"Saved source {source_id}: {record.title}")
        return source_id

    def list_sources(self) -> List[Dict[str, Any]]:
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT payload_json FROM sources ORDER BY created_at"
            ).fetchall()
        finally:
            conn.close()
        return [json.loads(row["payload_json"]) for row in rows]
