from __future__ import annotations

from sqlite3 import Connection
from typing import Optional

from ..db import RecordCreateError


def create_observation(conn: Connection, fields: dict) -> int:
    cur = conn.execute(
        "INSERT INTO observations(hike_id, type, name, time, comment) VALUES(?,?,?,?,?)",
        (
            fields["hike_id"],
            fields["type"],
            fields["name"],
            fields["time"],
            fields.get("comment") or "",
        ),
    )
    if not cur.lastrowid:
        raise RecordCreateError("Failed to create observation")
    return int(cur.lastrowid)


def get_observations_by_hike_id(conn: Connection, hike_id: int) -> list[dict]:
    rows = conn.execute(
        "SELECT * FROM observations WHERE hike_id=? ORDER BY time ASC", (hike_id,)
    ).fetchall()
    return [dict(r) for r in rows]


def get_observation_by_id(conn: Connection, observation_id: int) -> Optional[dict]:
    row = conn.execute("SELECT * FROM observations WHERE id=?", (observation_id,)).fetchone()
    return dict(row) if row else None


def delete_observation(conn: Connection, observation_id: int) -> None:
    conn.execute("DELETE FROM observations WHERE id=?", (observation_id,))
