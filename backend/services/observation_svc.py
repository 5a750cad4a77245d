from __future__ import annotations

# backend/services/observation_svc.py
from ..db import HikeDatabase
from ..domain.hike_rules import format_errors, to_utc_timestamp, validate_observation
from ..logs import LogContext
from ..repository import hike_repo, observation_repo


def list_observations(db: HikeDatabase, hike_id: int) -> list[dict]:
    with db.connection() as conn:
        return observation_repo.get_observations_by_hike_id(conn, hike_id)


def add_observation(db: HikeDatabase, hike_id: int, obs_type: str, time: str,
                    comment: str, log: LogContext) -> dict:
    data = {
        "type": (obs_type or "").strip().lower(),
        "time": (time or "").strip(),
        "comment": comment.strip() if isinstance(comment, str) else comment,
    }
    errors = validate_observation(data)
    if errors:
        raise ValueError(format_errors(errors))
    data["time"] = to_utc_timestamp(data["time"])
    with db.connection() as conn:
        if not hike_repo.get_hike_by_id(conn, hike_id):
            raise LookupError("hike_not_found")
        # name mirrors the type; the column predates free-form titles
        obs_id = observation_repo.create_observation(
            conn, {"hike_id": hike_id, "name": data["type"], **data}
        )
        created = observation_repo.get_observation_by_id(conn, obs_id)
    log.set_entity("OBSERVATION", obs_id)
    log.set_after(created)
    return created


def delete_observation(db: HikeDatabase, observation_id: int, log: LogContext) -> None:
    with db.connection() as conn:
        observation_repo.delete_observation(conn, observation_id)
    log.set_entity("OBSERVATION", observation_id)
