from __future__ import annotations

import datetime as dt
import re
from typing import Any

DIFFICULTIES = ("easy", "moderate", "hard")
OBSERVATION_TYPES = ("wildlife", "landmark", "weather", "other")
HIKE_STATUSES = ("completed", "planned")
MIN_PASSWORD_LENGTH = 6

_LEADING_NUMBER = re.compile(r"^\s*([-+]?\d+(?:\.\d+)?)")
_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_distance(length: Any) -> float:
    """Leading number of a free-text length ("8.5", "8.5 km"); 0.0 when none."""
    if length is None:
        return 0.0
    if isinstance(length, (int, float)):
        return float(length)
    m = _LEADING_NUMBER.match(str(length))
    return float(m.group(1)) if m else 0.0


def is_iso_date(s: Any) -> bool:
    """YYYY-MM-DD only; lexicographic ordering of stored dates relies on it."""
    if not isinstance(s, str) or not _ISO_DATE.fullmatch(s):
        return False
    try:
        dt.date.fromisoformat(s)
    except ValueError:
        return False
    return True


def _parse_timestamp(s: Any) -> dt.datetime | None:
    if not isinstance(s, str) or not s.strip():
        return None
    v = s.strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    try:
        return dt.datetime.fromisoformat(v)
    except ValueError:
        return None


def is_iso_timestamp(s: Any) -> bool:
    return _parse_timestamp(s) is not None


def to_utc_timestamp(s: str) -> str:
    """
    Normalize an ISO-8601 timestamp to UTC, e.g. ``2024-05-01T07:00:00.000Z``.

    Naive values are taken as UTC. Observations are ordered by the stored text,
    so every stored time must share this one form.
    """
    parsed = _parse_timestamp(s)
    if parsed is None:
        raise ValueError(f"invalid timestamp: {s!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    utc = parsed.astimezone(dt.timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def _blank(v: Any) -> bool:
    return v is None or (isinstance(v, str) and not v.strip())


def validate_hike(data: dict, partial: bool = False) -> dict[str, str]:
    """
    Field -> message for every invalid field; empty dict when valid.

    With ``partial`` only the keys present in ``data`` are checked.
    """
    errors: dict[str, str] = {}

    def present(k: str) -> bool:
        return (not partial) or (k in data)

    if present("name") and _blank(data.get("name")):
        errors["name"] = "Hike name is required"
    if present("location") and _blank(data.get("location")):
        errors["location"] = "Location is required"
    if present("date"):
        if _blank(data.get("date")):
            errors["date"] = "Date is required"
        elif not is_iso_date(data.get("date")):
            errors["date"] = "Date must be YYYY-MM-DD"
    if present("length"):
        if _blank(data.get("length")) or parse_distance(data.get("length")) <= 0:
            errors["length"] = "Length must be greater than 0"
    if present("duration") and _blank(data.get("duration")):
        errors["duration"] = "Duration is required"
    if present("difficulty") and data.get("difficulty") not in DIFFICULTIES:
        errors["difficulty"] = f"Difficulty must be one of {', '.join(DIFFICULTIES)}"
    return errors


def validate_observation(data: dict) -> dict[str, str]:
    errors: dict[str, str] = {}
    if data.get("type") not in OBSERVATION_TYPES:
        errors["type"] = f"Type must be one of {', '.join(OBSERVATION_TYPES)}"
    if _blank(data.get("comment")):
        errors["comment"] = "Observation is required"
    if _blank(data.get("time")):
        errors["time"] = "Time is required"
    elif not is_iso_timestamp(data.get("time")):
        errors["time"] = "Time must be an ISO-8601 timestamp"
    return errors


def validate_registration(name: str, email: str, password: str, confirm_password: str | None = None) -> str | None:
    """First problem found as a message, or None."""
    if _blank(name) or _blank(email) or not password:
        return "Please fill in all fields"
    if confirm_password is not None and password != confirm_password:
        return "Passwords do not match"
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return None


def format_errors(errors: dict[str, str]) -> str:
    return "; ".join(f"{k}: {v}" for k, v in errors.items())
