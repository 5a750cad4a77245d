from __future__ import annotations

# backend/services/utils.py


def public_user(row: dict | None) -> dict | None:
    """User row without the password column."""
    if not row:
        return None
    return {"id": row["id"], "name": row["name"], "email": row["email"], "created_at": row.get("created_at")}
