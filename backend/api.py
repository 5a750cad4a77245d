"""
FastAPI app entry point aggregating per-domain routers under backend/routes.
Keep as `uvicorn backend.api:app`.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .db import HikeDatabase

logger = logging.getLogger(__name__)

app = FastAPI(title="mhike-api", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "capacitor://localhost",
        "http://localhost",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    db = getattr(app.state, "db", None) or HikeDatabase()
    try:
        db.initialize()
    except Exception:
        logger.exception("Database initialization failed, refusing to start")
        raise
    app.state.db = db


@app.on_event("shutdown")
def on_shutdown():
    db = getattr(app.state, "db", None)
    if db is not None:
        db.close()
    app.state.db = None


# Include routers (split by business domain)
from .routes import base as base_routes
from .routes import auth as auth_routes
from .routes import hikes as hikes_routes
from .routes import observations as observations_routes
from .routes import logs as logs_routes

app.include_router(base_routes.router)
app.include_router(auth_routes.router)
app.include_router(hikes_routes.router)
app.include_router(observations_routes.router)
app.include_router(logs_routes.router)
