from __future__ import annotations

from sqlite3 import Connection, Row
from typing import Any, Optional

from ..db import RecordCreateError

# columns a partial update may touch, in statement order
UPDATABLE_FIELDS = (
    "name",
    "location",
    "date",
    "length",
    "difficulty",
    "parking_available",
    "description",
    "duration",
    "completed",
)
_BOOL_FIELDS = ("parking_available", "completed")


def _to_int_flag(v: Any) -> int:
    return 1 if v else 0


def _row_to_hike(row: Row) -> dict:
    it = dict(row)
    for k in _BOOL_FIELDS:
        if k in it:
            it[k] = it[k] == 1
    return it


def create_hike(conn: Connection, fields: dict) -> int:
    cur = conn.execute(
        "INSERT INTO hikes(user_id, name, location, date, length, difficulty, parking_available, "
        "description, duration, completed) VALUES(?,?,?,?,?,?,?,?,?,?)",
        (
            fields["user_id"],
            fields["name"],
            fields["location"],
            fields["date"],
            fields["length"],
            fields["difficulty"],
            _to_int_flag(fields.get("parking_available")),
            fields.get("description") or "",
            fields.get("duration") or "",
            _to_int_flag(fields.get("completed")),
        ),
    )
    if not cur.lastrowid:
        raise RecordCreateError("Failed to create hike")
    return int(cur.lastrowid)


def get_hikes_by_user_id(conn: Connection, user_id: int) -> list[dict]:
    rows = conn.execute(
        "SELECT * FROM hikes WHERE user_id=? ORDER BY date DESC", (user_id,)
    ).fetchall()
    return [_row_to_hike(r) for r in rows]


def get_hike_by_id(conn: Connection, hike_id: int) -> Optional[dict]:
    row = conn.execute("SELECT * FROM hikes WHERE id=?", (hike_id,)).fetchone()
    return _row_to_hike(row) if row else None


def update_hike(conn: Connection, hike_id: int, fields: dict) -> None:
    """Partial update: only keys present in ``fields`` are written."""
    updates: list[str] = []
    values: list[Any] = []
    for k in UPDATABLE_FIELDS:
        if k not in fields:
            continue
        v = fields[k]
        if k in _BOOL_FIELDS:
            v = _to_int_flag(v)
        updates.append(f"{k} = ?")
        values.append(v)

    if not updates:
        return

    values.append(hike_id)
    conn.execute(f"UPDATE hikes SET {', '.join(updates)} WHERE id = ?", values)


def delete_hike(conn: Connection, hike_id: int) -> None:
    # observations go with it (ON DELETE CASCADE)
    conn.execute("DELETE FROM hikes WHERE id=?", (hike_id,))


def delete_hikes_by_user_id(conn: Connection, user_id: int) -> int:
    cur = conn.execute("DELETE FROM hikes WHERE user_id=?", (user_id,))
    return cur.rowcount


def search_hikes(
    conn: Connection,
    user_id: int,
    term: str | None = None,
    *,
    name: str | None = None,
    location: str | None = None,
    min_length: float | None = None,
    max_length: float | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    difficulty: str | None = None,
    status: str | None = None,
) -> list[dict]:
    """
    Hikes of ``user_id`` whose name, location or description contains ``term``.

    Matching uses LIKE, so it is case-insensitive for ASCII only. The keyword
    filters narrow the result further; None/empty values are ignored.
    ``status`` is ``completed`` or ``planned``.
    """
    where = ["user_id = :user_id"]
    params: dict[str, Any] = {"user_id": user_id}
    if term:
        where.append("(name LIKE :term OR location LIKE :term OR COALESCE(description,'') LIKE :term)")
        params["term"] = f"%{term}%"
    if name:
        where.append("name LIKE :name")
        params["name"] = f"%{name}%"
    if location:
        where.append("location LIKE :location")
        params["location"] = f"%{location}%"
    if min_length is not None:
        where.append("CAST(length AS REAL) >= :min_length")
        params["min_length"] = float(min_length)
    if max_length is not None:
        where.append("CAST(length AS REAL) <= :max_length")
        params["max_length"] = float(max_length)
    # ISO dates compare correctly as strings
    if date_from:
        where.append("date >= :date_from")
        params["date_from"] = date_from
    if date_to:
        where.append("date <= :date_to")
        params["date_to"] = date_to
    if difficulty and difficulty != "all":
        where.append("difficulty = :difficulty")
        params["difficulty"] = difficulty
    if status == "completed":
        where.append("completed = 1")
    elif status == "planned":
        where.append("completed = 0")

    sql = f"SELECT * FROM hikes WHERE {' AND '.join(where)} ORDER BY date DESC"
    return [_row_to_hike(r) for r in conn.execute(sql, params).fetchall()]
