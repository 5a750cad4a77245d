import os
import sys
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture()
def tmp_db_path(tmp_path, monkeypatch):
    path = tmp_path / "mhike_test.db"
    # Point backend to this temp DB
    monkeypatch.setenv("MHIKE_DB_PATH", str(path))
    return str(path)


@pytest.fixture()
def db(tmp_db_path):
    from backend.db import HikeDatabase
    handle = HikeDatabase(tmp_db_path)
    handle.initialize()
    yield handle
    handle.close()


@pytest.fixture()
def conn(db):
    with db.connection() as c:
        yield c


@pytest.fixture()
def user_id(conn):
    from backend.repository import user_repo
    return user_repo.create_user(conn, "a@x.com", "p", "A")


@pytest.fixture()
def log(db):
    from backend.logs import LogContext
    return LogContext(db, "TEST")


@pytest.fixture()
def client(tmp_db_path):
    # Import app after DB path is set so the startup hook opens the temp DB
    from backend.api import app
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def make_hike():
    """Factory for valid hike fields; keyword overrides replace defaults."""
    def _make(**overrides):
        hike = {
            "user_id": 1,
            "name": "Ridge Walk",
            "location": "Hills",
            "date": "2024-05-01",
            "length": "8",
            "difficulty": "easy",
            "parking_available": True,
            "description": "",
        }
        hike.update(overrides)
        return hike
    return _make
