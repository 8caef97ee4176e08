"""
FastAPI app entry point aggregating per-domain routers under record_admin/routes.
Keep as `uvicorn record_admin.api:app`.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .db import close_db, init_db, open_db

logger = logging.getLogger(__name__)

app = FastAPI(title="record-admin-api", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    conn = open_db()
    init_db(conn)
    app.state.db = conn
    logger.info("record-admin-api started")


@app.on_event("shutdown")
def on_shutdown():
    conn = getattr(app.state, "db", None)
    if conn is not None:
        close_db(conn)
        app.state.db = None


# Include routers (split by business domain)
from .routes import base as base_routes
from .routes import users as users_routes
from .routes import logs as logs_routes

app.include_router(base_routes.router)
app.include_router(users_routes.router)
app.include_router(logs_routes.router)
