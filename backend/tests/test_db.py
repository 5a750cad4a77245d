import sqlite3

import pytest

from backend.db import (
    DatabaseInitError,
    DatabaseNotInitializedError,
    HikeDatabase,
    MEMORY_DB,
    get_db_path,
)
from backend.repository import user_repo


def test_initialize_is_idempotent(tmp_db_path):
    db = HikeDatabase(tmp_db_path)
    db.initialize()
    with db.connection() as conn:
        user_repo.create_user(conn, "a@x.com", "p", "A")
    db.initialize()
    assert db.is_initialized
    with db.connection() as conn:
        assert user_repo.get_user_by_email(conn, "a@x.com") is not None
    db.close()


def test_operations_before_initialize_fail_fast(tmp_db_path):
    db = HikeDatabase(tmp_db_path)
    with pytest.raises(DatabaseNotInitializedError):
        with db.connection() as conn:
            user_repo.get_user_by_id(conn, 1)


def test_close_without_connection_is_noop(tmp_db_path):
    db = HikeDatabase(tmp_db_path)
    db.close()
    db.close()
    assert not db.is_initialized


def test_close_then_reinitialize(tmp_db_path):
    db = HikeDatabase(tmp_db_path)
    db.initialize()
    with db.connection() as conn:
        uid = user_repo.create_user(conn, "a@x.com", "p", "A")
    db.close()
    assert not db.is_initialized
    with pytest.raises(DatabaseNotInitializedError):
        with db.connection():
            pass

    db.initialize()
    with db.connection() as conn:
        assert user_repo.get_user_by_id(conn, uid)["email"] == "a@x.com"
    db.close()


def test_schema_tables_and_indexes(conn):
    names = {
        r["name"]
        for r in conn.execute("SELECT name FROM sqlite_master WHERE type IN ('table','index')").fetchall()
    }
    for expected in ("users", "hikes", "observations", "operation_log",
                     "idx_hikes_user_id", "idx_observations_hike_id"):
        assert expected in names
    assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1


def test_initialize_failure_is_fatal(tmp_path):
    # a directory cannot be opened as a database file
    db = HikeDatabase(str(tmp_path))
    with pytest.raises(DatabaseInitError):
        db.initialize()
    assert not db.is_initialized


def test_legacy_database_gets_status_columns(tmp_db_path):
    legacy = sqlite3.connect(tmp_db_path)
    legacy.executescript(
        """
        CREATE TABLE users (id INTEGER PRIMARY KEY AUTOINCREMENT, email TEXT UNIQUE NOT NULL,
          password TEXT NOT NULL, name TEXT NOT NULL, created_at DATETIME DEFAULT CURRENT_TIMESTAMP);
        CREATE TABLE hikes (id INTEGER PRIMARY KEY AUTOINCREMENT, user_id INTEGER NOT NULL,
          name TEXT NOT NULL, location TEXT NOT NULL, date TEXT NOT NULL, length TEXT NOT NULL,
          difficulty TEXT NOT NULL, parking_available INTEGER NOT NULL, description TEXT,
          created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
          FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE);
        INSERT INTO users(email, password, name) VALUES ('old@x.com', 'secret', 'Old');
        INSERT INTO hikes(user_id, name, location, date, length, difficulty, parking_available, description)
          VALUES (1, 'Old Trail', 'Valley', '2020-01-01', '5', 'hard', 0, NULL);
        """
    )
    legacy.commit()
    legacy.close()

    db = HikeDatabase(tmp_db_path)
    db.initialize()
    with db.connection() as conn:
        cols = {r[1] for r in conn.execute("PRAGMA table_info(hikes)").fetchall()}
        assert {"duration", "completed"} <= cols
        row = conn.execute("SELECT duration, completed FROM hikes WHERE id=1").fetchone()
        assert row["duration"] == ""
        assert row["completed"] == 0
    db.close()


def test_memory_database_is_isolated():
    a = HikeDatabase(MEMORY_DB)
    b = HikeDatabase(MEMORY_DB)
    a.initialize()
    b.initialize()
    with a.connection() as conn:
        user_repo.create_user(conn, "a@x.com", "p", "A")
    with b.connection() as conn:
        assert user_repo.get_user_by_email(conn, "a@x.com") is None
    a.close()
    b.close()


def test_db_path_prefers_env(tmp_path, monkeypatch):
    target = tmp_path / "nested" / "custom.db"
    monkeypatch.setenv("MHIKE_DB_PATH", str(target))
    assert get_db_path() == str(target)
    assert target.parent.is_dir()
