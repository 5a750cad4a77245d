from __future__ import annotations

from fastapi import Request

from ..db import HikeDatabase


def get_db(request: Request) -> HikeDatabase:
    """The HikeDatabase created at startup (see backend.api)."""
    return request.app.state.db
