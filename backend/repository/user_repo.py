from __future__ import annotations

from sqlite3 import Connection
from typing import Optional

from ..db import RecordCreateError


def create_user(conn: Connection, email: str, password: str, name: str) -> int:
    # duplicate email -> sqlite3.IntegrityError from the UNIQUE constraint
    cur = conn.execute(
        "INSERT INTO users(email, password, name) VALUES(?, ?, ?)",
        (email, password, name),
    )
    if not cur.lastrowid:
        raise RecordCreateError("Failed to create user")
    return int(cur.lastrowid)


def get_user_by_email(conn: Connection, email: str) -> Optional[dict]:
    row = conn.execute("SELECT * FROM users WHERE email=?", (email,)).fetchone()
    return dict(row) if row else None


def get_user_by_id(conn: Connection, user_id: int) -> Optional[dict]:
    row = conn.execute("SELECT * FROM users WHERE id=?", (user_id,)).fetchone()
    return dict(row) if row else None
