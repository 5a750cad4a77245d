#!/usr/bin/env python3
"""
Migration: add duration and completed columns to the hikes table.

Both columns are additive with defaults, so databases created by older
builds keep working and their rows read back as duration='' / completed=0.
"""
from __future__ import annotations


import sqlite3

HIKE_STATUS_COLUMNS = {
    "duration": "ALTER TABLE hikes ADD COLUMN duration TEXT DEFAULT ''",
    "completed": "ALTER TABLE hikes ADD COLUMN completed INTEGER NOT NULL DEFAULT 0",
}


def ensure_hike_status_columns(conn: sqlite3.Connection) -> list[str]:
    """Add any missing column; returns the names that were added."""
    cols = conn.execute("PRAGMA table_info(hikes)").fetchall()
    names = {c[1] for c in cols}
    added = []
    for col, ddl in HIKE_STATUS_COLUMNS.items():
        if col not in names:
            conn.execute(ddl)
            added.append(col)
    return added


def migrate_hike_status(db_path: str) -> list[str]:
    conn = sqlite3.connect(db_path)
    try:
        added = ensure_hike_status_columns(conn)
        conn.commit()
        print(f"Migration completed successfully, added: {added or 'nothing'}")
        return added
    except Exception as e:
        conn.rollback()
        print(f"Migration failed: {e}")
        raise
    finally:
        conn.close()


if __name__ == "__main__":
    from backend.db import get_db_path

    db_path = get_db_path()
    print(f"Running hike status migration on {db_path}")
    migrate_hike_status(db_path)
