from __future__ import annotations

# backend/services/hike_svc.py
from typing import Any

from ..db import HikeDatabase
from ..domain.hike_rules import HIKE_STATUSES, format_errors, parse_distance, validate_hike
from ..logs import LogContext
from ..repository import hike_repo, observation_repo, user_repo

_CREATE_FIELDS = (
    "name", "location", "date", "length", "difficulty",
    "parking_available", "description", "duration",
)


def to_view(hike: dict, observations: list[dict] | None = None) -> dict:
    """Hike row plus the derived numeric distance and its observations."""
    it = dict(hike)
    it["distance"] = parse_distance(hike.get("length"))
    if observations is not None:
        it["observations"] = observations
    return it


def _clean(data: dict, keys) -> dict:
    out = {}
    for k in keys:
        if k not in data:
            continue
        v = data[k]
        if k == "length" and isinstance(v, (int, float)) and not isinstance(v, bool):
            v = str(v)  # stored as free text
        out[k] = v.strip() if isinstance(v, str) else v
    return out


def list_hikes(db: HikeDatabase, user_id: int, with_observations: bool = True) -> list[dict]:
    with db.connection() as conn:
        hikes = hike_repo.get_hikes_by_user_id(conn, user_id)
        items = []
        for h in hikes:
            obs = observation_repo.get_observations_by_hike_id(conn, h["id"]) if with_observations else None
            items.append(to_view(h, obs))
    return items


def get_hike(db: HikeDatabase, hike_id: int, with_observations: bool = True) -> dict | None:
    with db.connection() as conn:
        h = hike_repo.get_hike_by_id(conn, hike_id)
        if not h:
            return None
        obs = observation_repo.get_observations_by_hike_id(conn, hike_id) if with_observations else None
    return to_view(h, obs)


def search_hikes(db: HikeDatabase, user_id: int, term: str | None = None, **filters: Any) -> list[dict]:
    status = filters.get("status")
    if status and status != "all" and status not in HIKE_STATUSES:
        raise ValueError(f"status must be one of all, {', '.join(HIKE_STATUSES)}")
    if status == "all":
        filters["status"] = None
    with db.connection() as conn:
        rows = hike_repo.search_hikes(conn, user_id, term, **filters)
    return [to_view(r) for r in rows]


def add_hike(db: HikeDatabase, user_id: int, data: dict, log: LogContext) -> dict:
    fields = _clean(data, _CREATE_FIELDS)
    errors = validate_hike(fields)
    if errors:
        raise ValueError(format_errors(errors))
    fields["parking_available"] = bool(fields.get("parking_available"))
    fields["user_id"] = user_id
    with db.connection() as conn:
        if not user_repo.get_user_by_id(conn, user_id):
            raise LookupError("user_not_found")
        hike_id = hike_repo.create_hike(conn, fields)
        created = hike_repo.get_hike_by_id(conn, hike_id)
    log.set_entity("HIKE", hike_id)
    log.set_after(created)
    return to_view(created, [])


def update_hike(db: HikeDatabase, hike_id: int, updates: dict, log: LogContext) -> dict:
    fields = _clean(updates, hike_repo.UPDATABLE_FIELDS)
    errors = validate_hike(fields, partial=True)
    if errors:
        raise ValueError(format_errors(errors))
    with db.connection() as conn:
        before = hike_repo.get_hike_by_id(conn, hike_id)
        if not before:
            raise LookupError("hike_not_found")
        hike_repo.update_hike(conn, hike_id, fields)
        after = hike_repo.get_hike_by_id(conn, hike_id)
    log.set_entity("HIKE", hike_id)
    log.set_before(before)
    log.set_after(after)
    return to_view(after)


def set_completed(db: HikeDatabase, hike_id: int, completed: bool, log: LogContext) -> dict:
    return update_hike(db, hike_id, {"completed": bool(completed)}, log)


def delete_hike(db: HikeDatabase, hike_id: int, log: LogContext) -> None:
    with db.connection() as conn:
        before = hike_repo.get_hike_by_id(conn, hike_id)
        if not before:
            raise LookupError("hike_not_found")
        hike_repo.delete_hike(conn, hike_id)
    log.set_entity("HIKE", hike_id)
    log.set_before(before)


def delete_all_hikes(db: HikeDatabase, user_id: int, log: LogContext) -> int:
    with db.connection() as conn:
        deleted = hike_repo.delete_hikes_by_user_id(conn, user_id)
    log.set_entity("USER", user_id)
    log.set_after({"deleted": deleted})
    return deleted
