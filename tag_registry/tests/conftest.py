import os
import sys
import sqlite3
import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


class FakeClock:
    """Advances one second per call so every write gets a distinct timestamp."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "tag_registry_test.db"
    # Point the app at this temp DB
    os.environ["TAG_REGISTRY_DB_PATH"] = str(path)
    return str(path)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store(tmp_db_path, clock):
    from tag_registry.services.tag_svc import TagStore
    s = TagStore(tmp_db_path, clock=clock)
    s.ensure_schema()
    return s


@pytest.fixture()
def app(store, tmp_path):
    from tag_registry.api import create_app
    from tag_registry.config import Settings
    return create_app(Settings(data_dir=str(tmp_path), prefix="api"), store)


@pytest.fixture()
def client(app):
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Clean tables before each test for isolation
    # Safety: ensure we only ever wipe the temp DB, never a real one
    assert os.environ.get("TAG_REGISTRY_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    conn = sqlite3.connect(tmp_db_path)
    try:
        try:
            conn.execute("DELETE FROM tag_record")
        except sqlite3.OperationalError:
            pass  # table not created yet
        conn.commit()
    finally:
        conn.close()
    yield
