from __future__ import annotations

# tag_registry/db.py
import sqlite3
from contextlib import contextmanager
from typing import Iterator
import os

DB_FILENAME = "data.db"
BUSY_TIMEOUT_S = 5.0


# DB 路径解析顺序：
# 1) 环境变量 TAG_REGISTRY_DB_PATH（最高优先级，测试使用）
# 2) <data_dir>/data.db
def get_db_path(data_dir: str) -> str:
    env_path = os.environ.get("TAG_REGISTRY_DB_PATH")
    return env_path or os.path.join(data_dir, DB_FILENAME)


def ensure_parent_dir(path: str) -> None:
    # 确保目录存在
    dirn = os.path.dirname(path) or "."
    os.makedirs(dirn, mode=0o755, exist_ok=True)


@contextmanager
def get_conn(db_path: str) -> Iterator[sqlite3.Connection]:
    """
    获取 SQLite 连接。每次调用独立连接，调用方负责事务。
    autocommit 模式（isolation_level=None），row_factory 为 Row，
    busy timeout 让并发写入等待而不是立即失败。
    """
    conn = sqlite3.connect(
        db_path,
        timeout=BUSY_TIMEOUT_S,
        check_same_thread=False,
        isolation_level=None,
    )
    try:
        conn.row_factory = sqlite3.Row
        yield conn
    finally:
        conn.close()
