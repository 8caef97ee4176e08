from __future__ import annotations

from enum import Enum
from sqlite3 import Connection
from typing import Any, Dict, TypedDict

from .base_model import BaseModel

TABLE = "users"

DDL = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
)
"""

DEFAULT_USERS = [
    ("John Doe", "john@example.com"),
    ("Jane Smith", "jane@example.com"),
    ("Alice Johnson", "alice@example.com"),
]


class _UserBase(TypedDict):
    id: int
    name: str
    email: str


class User(_UserBase, total=False):
    created_at: str


class UserColumn(str, Enum):
    ID = "id"
    NAME = "name"
    EMAIL = "email"
    CREATED_AT = "created_at"


def ensure_schema(conn: Connection):
    conn.execute(DDL)


def seed_defaults(conn: Connection) -> int:
    n = conn.execute("SELECT COUNT(*) AS count FROM users").fetchone()["count"]
    if n:
        return 0
    for name, email in DEFAULT_USERS:
        conn.execute("INSERT INTO users (name, email) VALUES (?, ?)", (name, email))
    return len(DEFAULT_USERS)


def typed(conn: Connection) -> BaseModel[User]:
    return BaseModel[User](conn, TABLE, columns=UserColumn)


def untyped(conn: Connection) -> BaseModel[Dict[str, Any]]:
    return BaseModel(conn, TABLE)
