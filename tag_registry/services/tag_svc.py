"""
Tag record store.

TagStore is the object the HTTP layer depends on. Each call opens its own
connection, so one instance can be shared by concurrent request threads.
"""
from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Callable, List, Optional

from ..db import ensure_parent_dir, get_conn
from ..domain.tag_key import MAX_LIMIT, TagRecord
from ..repository import tag_repo

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Storage-layer failure."""


class StoreReadError(StoreError):
    pass


class StoreWriteError(StoreError):
    pass


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TagStore:
    def __init__(self, db_path: str, clock: Callable[[], datetime] = utc_now):
        self.db_path = db_path
        self._clock = clock

    def ensure_schema(self):
        """Create the data directory and table if missing. Safe to call repeatedly."""
        try:
            ensure_parent_dir(self.db_path)
            with get_conn(self.db_path) as conn:
                tag_repo.ensure_schema(conn)
        except (OSError, sqlite3.Error) as e:
            raise StoreError(f"cannot initialize store at {self.db_path}: {e}") from e
        logger.info("tag store ready: %s", self.db_path)

    def upsert(self, name: str, tag: str) -> TagRecord:
        """
        Insert (name, tag) or refresh its updated_at.

        The conflict clause on UNIQUE(name, tag) makes the write atomic, so
        concurrent upserts of the same pair never produce a second row. The
        read-back runs in the same transaction and sees exactly this write.
        """
        if not name or not tag:
            raise ValueError("name and tag must be non-empty")
        now = self._clock()
        try:
            with get_conn(self.db_path) as conn:
                conn.execute("BEGIN IMMEDIATE")
                try:
                    tag_repo.upsert(conn, name, tag, now)
                    row = tag_repo.get_one(conn, name, tag)
                    conn.execute("COMMIT")
                except Exception:
                    conn.execute("ROLLBACK")
                    raise
        except sqlite3.Error as e:
            raise StoreWriteError(f"upsert {name}:{tag} failed: {e}") from e
        if row is None:
            raise StoreWriteError(f"upsert {name}:{tag} returned no row")
        return tag_repo.row_to_record(row)

    def list_by_name(self, name: str, limit: Optional[int] = None) -> List[TagRecord]:
        """Records for name, most recently updated first. limit None, <= 0 or past MAX_LIMIT means unbounded."""
        if limit is not None and (limit <= 0 or limit > MAX_LIMIT):
            limit = None
        try:
            with get_conn(self.db_path) as conn:
                rows = tag_repo.list_by_name(conn, name, limit)
        except sqlite3.Error as e:
            raise StoreReadError(f"list {name} failed: {e}") from e
        return [tag_repo.row_to_record(r) for r in rows]

    def get(self, name: str, tag: str) -> Optional[TagRecord]:
        try:
            with get_conn(self.db_path) as conn:
                row = tag_repo.get_one(conn, name, tag)
        except sqlite3.Error as e:
            raise StoreReadError(f"get {name}:{tag} failed: {e}") from e
        return tag_repo.row_to_record(row) if row else None

    def count(self, name: str, tag: Optional[str] = None) -> int:
        try:
            with get_conn(self.db_path) as conn:
                return tag_repo.count(conn, name, tag)
        except sqlite3.Error as e:
            raise StoreReadError(f"count {name} failed: {e}") from e
