from __future__ import annotations

# backend/db.py
import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from typing import Iterator

import yaml

logger = logging.getLogger(__name__)

# DB path resolution order:
# 1) env MHIKE_DB_PATH (highest priority)
# 2) config.yaml test_db_path (when running under tests)
# 3) config.yaml db_path
# 4) fallback: mhike.db at the project root
_PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
_ROOT_DB = os.path.join(_PROJECT_ROOT, "mhike.db")
MEMORY_DB = ":memory:"

DDL = """
CREATE TABLE IF NOT EXISTS users (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  email TEXT UNIQUE NOT NULL,
  password TEXT NOT NULL,
  name TEXT NOT NULL,
  created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS hikes (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  user_id INTEGER NOT NULL,
  name TEXT NOT NULL,
  location TEXT NOT NULL,
  date TEXT NOT NULL,
  length TEXT NOT NULL,
  difficulty TEXT NOT NULL,
  parking_available INTEGER NOT NULL,
  description TEXT,
  created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
  FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS observations (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  hike_id INTEGER NOT NULL,
  type TEXT NOT NULL,
  name TEXT NOT NULL,
  time TEXT NOT NULL,
  comment TEXT,
  created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
  FOREIGN KEY (hike_id) REFERENCES hikes(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_hikes_user_id ON hikes(user_id);
CREATE INDEX IF NOT EXISTS idx_observations_hike_id ON observations(hike_id);
"""


class DatabaseNotInitializedError(RuntimeError):
    """Raised when an operation runs before HikeDatabase.initialize()."""

    def __init__(self, message: str = "Database not initialized"):
        super().__init__(message)


class DatabaseInitError(RuntimeError):
    """Opening the connection or creating the schema failed."""


class RecordCreateError(RuntimeError):
    """An INSERT did not report the id of the new row."""


def _read_config_yaml() -> dict:
    cfg_path = os.path.join(_PROJECT_ROOT, "config.yaml")
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable config.yaml: %s", e)
        return {}
    out = {}
    for k in ("db_path", "test_db_path"):
        v = cfg.get(k)
        if isinstance(v, str) and v.strip():
            out[k] = v.strip()
    return out


def get_db_path() -> str:
    env_path = os.environ.get("MHIKE_DB_PATH")
    cfg = _read_config_yaml()
    cfg_db = cfg.get("db_path")
    cfg_test = cfg.get("test_db_path")
    is_test = (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)

    if env_path:
        path = env_path
    elif is_test and cfg_test:
        path = cfg_test
    elif cfg_db:
        path = cfg_db
    else:
        path = _ROOT_DB

    if path != MEMORY_DB:
        # make sure the parent directory exists
        dirn = os.path.dirname(path) or "."
        os.makedirs(dirn, exist_ok=True)
    return path


class HikeDatabase:
    """
    Owned handle around a single SQLite connection.

    Construct one per application (or per test), call ``initialize()`` once,
    then hand the instance to services/routes. Repository functions receive
    the raw connection through ``connection()``.
    """

    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or get_db_path()
        self._conn: sqlite3.Connection | None = None
        self._initialized = False
        self._lock = threading.RLock()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """Open the connection and create the schema. Safe to call repeatedly."""
        with self._lock:
            if self._initialized:
                return
            conn = None
            try:
                conn = sqlite3.connect(
                    self.db_path,
                    check_same_thread=False,
                    isolation_level=None,
                )
                conn.execute("PRAGMA foreign_keys = ON;")
                conn.row_factory = sqlite3.Row
                conn.executescript(DDL)
                # late imports: both modules import this one
                from .migrations.add_hike_status_columns import ensure_hike_status_columns
                from .logs import ensure_log_schema

                ensure_hike_status_columns(conn)
                ensure_log_schema(conn)
            except sqlite3.Error as e:
                if conn is not None:
                    conn.close()
                logger.error("Error initializing database at %s: %s", self.db_path, e)
                raise DatabaseInitError(f"Failed to initialize database: {e}") from e
            self._conn = conn
            self._initialized = True
            logger.info("Database initialized at %s", self.db_path)

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Yield the open connection; statements are serialized by the handle lock."""
        with self._lock:
            if not self._initialized or self._conn is None:
                raise DatabaseNotInitializedError()
            yield self._conn

    def close(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
            self._initialized = False
            logger.info("Database connection closed (%s)", self.db_path)
