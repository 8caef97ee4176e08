from __future__ import annotations

# record_admin/db.py
import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Iterator

import yaml

from .logs import ensure_log_schema
from .repository import user_repo

# DB path resolution order:
# 1) env RECORD_DB_PATH (highest priority)
# 2) config.yaml test_db_path (when running under tests)
# 3) config.yaml db_path
# 4) fallback: app.db at the project root
_PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
_ROOT_DB = os.path.join(_PROJECT_ROOT, "app.db")

logger = logging.getLogger(__name__)


def _read_config_yaml() -> dict:
    cfg_path = os.path.join(_PROJECT_ROOT, "config.yaml")
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("config.yaml unreadable, using defaults: %s", e)
        return {}
    out = {}
    for k in ("db_path", "test_db_path"):
        v = cfg.get(k)
        if isinstance(v, str) and v.strip():
            out[k] = v.strip()
    if isinstance(cfg.get("seed"), bool):
        out["seed"] = cfg["seed"]
    return out


def get_db_path() -> str:
    env_path = os.environ.get("RECORD_DB_PATH")
    cfg = _read_config_yaml()
    cfg_db = cfg.get("db_path")
    cfg_test = cfg.get("test_db_path")
    is_test = (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)

    if env_path:
        path = env_path
    elif is_test and cfg_test:
        path = cfg_test
    elif cfg_db:
        path = cfg_db
    else:
        path = _ROOT_DB

    dirn = os.path.dirname(path) or "."
    os.makedirs(dirn, exist_ok=True)
    return path


def seed_enabled() -> bool:
    return bool(_read_config_yaml().get("seed", True))


def _connect(path: str) -> sqlite3.Connection:
    conn = sqlite3.connect(
        path,
        detect_types=sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES,
        check_same_thread=False,
        isolation_level=None,
    )
    conn.execute("PRAGMA foreign_keys = ON;")
    conn.row_factory = sqlite3.Row
    return conn


def open_db(db_path: str | None = None) -> sqlite3.Connection:
    """
    Open the process-wide SQLite handle. The caller owns it and must pass it
    to close_db() when done.

    Autocommit mode: every statement is its own transaction.
    """
    path = db_path or get_db_path()
    conn = _connect(path)
    logger.info("opened database %s", path)
    return conn


def init_db(conn: sqlite3.Connection, seed: bool | None = None) -> int:
    """
    Create the users and operation_log tables if missing, then optionally seed
    fixture users into an empty users table. Returns the number of seeded rows.
    """
    user_repo.ensure_schema(conn)
    ensure_log_schema(conn)
    if seed is None:
        seed = seed_enabled()
    inserted = user_repo.seed_defaults(conn) if seed else 0
    if inserted:
        logger.info("seeded %d default users", inserted)
    return inserted


def close_db(conn: sqlite3.Connection) -> None:
    conn.close()
    logger.info("database closed")


@contextmanager
def get_conn(db_path: str | None = None) -> Iterator[sqlite3.Connection]:
    """
    Short-lived connection for scripts and tests. Prefers an explicit db_path,
    otherwise falls back to get_db_path().
    """
    conn = _connect(db_path or get_db_path())
    try:
        yield conn
    finally:
        conn.close()
