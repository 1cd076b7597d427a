from __future__ import annotations

from datetime import datetime, timezone
from sqlite3 import Connection, Row
from typing import List, Optional

from ..domain.tag_key import TagRecord

# 固定宽度的 UTC 时间文本，字符串排序即时间排序
TS_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

DDL = """
CREATE TABLE IF NOT EXISTS tag_record (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT NOT NULL,
  tag TEXT NOT NULL,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL,
  UNIQUE(name, tag)
);
CREATE INDEX IF NOT EXISTS idx_tag_record_name_updated ON tag_record(name, updated_at);
"""


def format_ts(ts: datetime) -> str:
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts.strftime(TS_FORMAT)


def parse_ts(s: str) -> datetime:
    return datetime.strptime(s, TS_FORMAT).replace(tzinfo=timezone.utc)


def row_to_record(row: Row) -> TagRecord:
    return TagRecord(
        id=int(row["id"]),
        name=row["name"],
        tag=row["tag"],
        created_at=parse_ts(row["created_at"]),
        updated_at=parse_ts(row["updated_at"]),
    )


def ensure_schema(conn: Connection):
    conn.executescript(DDL)


def upsert(conn: Connection, name: str, tag: str, now: datetime):
    """Insert (name, tag) or refresh updated_at of the existing row, in one statement."""
    ts = format_ts(now)
    conn.execute(
        "INSERT INTO tag_record(name, tag, created_at, updated_at) VALUES (?, ?, ?, ?) "
        "ON CONFLICT(name, tag) DO UPDATE SET updated_at=excluded.updated_at",
        (name, tag, ts, ts),
    )


def get_one(conn: Connection, name: str, tag: str) -> Optional[Row]:
    return conn.execute(
        "SELECT id, name, tag, created_at, updated_at FROM tag_record WHERE name=? AND tag=?",
        (name, tag),
    ).fetchone()


def list_by_name(conn: Connection, name: str, limit: Optional[int] = None) -> List[Row]:
    sql = (
        "SELECT id, name, tag, created_at, updated_at FROM tag_record "
        "WHERE name=? ORDER BY updated_at DESC, id DESC"
    )
    params: list[object] = [name]
    if limit is not None:
        sql += " LIMIT ?"
        params.append(int(limit))
    return conn.execute(sql, params).fetchall()


def count(conn: Connection, name: str, tag: Optional[str] = None) -> int:
    if tag is None:
        row = conn.execute("SELECT COUNT(1) AS cnt FROM tag_record WHERE name=?", (name,)).fetchone()
    else:
        row = conn.execute(
            "SELECT COUNT(1) AS cnt FROM tag_record WHERE name=? AND tag=?", (name, tag)
        ).fetchone()
    return int(row["cnt"])
