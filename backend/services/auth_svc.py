from __future__ import annotations

# backend/services/auth_svc.py
# NOTE: passwords are stored and compared as plain text to stay compatible
# with existing mhike.db files. Hashing would need a data migration.
from ..db import HikeDatabase
from ..domain.hike_rules import validate_registration
from ..logs import LogContext
from ..repository import user_repo
from .utils import public_user


def register(db: HikeDatabase, name: str, email: str, password: str,
             confirm_password: str | None, log: LogContext) -> dict:
    problem = validate_registration(name, email, password, confirm_password)
    if problem:
        raise ValueError(problem)
    email = email.strip()
    name = name.strip()
    with db.connection() as conn:
        if user_repo.get_user_by_email(conn, email):
            raise ValueError("email_already_registered")
        user_id = user_repo.create_user(conn, email, password, name)
        user = public_user(user_repo.get_user_by_id(conn, user_id))
    log.set_entity("USER", user_id)
    log.set_user(user_id)
    log.set_after(user)
    return user


def login(db: HikeDatabase, email: str, password: str) -> dict:
    if not email or not password:
        raise ValueError("Please fill in all fields")
    with db.connection() as conn:
        row = user_repo.get_user_by_email(conn, email.strip())
    if not row or row["password"] != password:
        raise ValueError("invalid_credentials")
    return public_user(row)


def get_user(db: HikeDatabase, user_id: int) -> dict | None:
    with db.connection() as conn:
        return public_user(user_repo.get_user_by_id(conn, user_id))
