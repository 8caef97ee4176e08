from __future__ import annotations

import re
from sqlite3 import Connection

import pandas as pd

from ..logs import LogContext
from ..repository import user_repo
from ..repository.user_repo import UserColumn

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Columns the UI may search on; anything else never reaches find_by.
SEARCHABLE = (UserColumn.NAME, UserColumn.EMAIL)


class UserNotFound(ValueError):
    pass


def _clean_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValueError("name_required")
    return name


def _clean_email(email: str) -> str:
    email = (email or "").strip()
    if not _EMAIL_RE.match(email):
        raise ValueError("invalid_email")
    return email


def list_users(conn: Connection) -> list[dict]:
    return user_repo.typed(conn).get_all()


def get_user(conn: Connection, user_id: int) -> dict:
    row = user_repo.typed(conn).get_by_id(user_id)
    if row is None:
        raise UserNotFound("user_not_found")
    return row


def find_users(conn: Connection, column: str, value: str) -> list[dict]:
    allowed = {c.value for c in SEARCHABLE}
    if column not in allowed:
        raise ValueError(f"column_not_searchable: {column}")
    return user_repo.typed(conn).find_by(column, value)


def user_stats(conn: Connection) -> dict:
    return {"total": user_repo.typed(conn).count()}


def create_user(conn: Connection, name: str, email: str, log: LogContext) -> dict:
    """
    Insert a user. A duplicate email raises sqlite3.IntegrityError, which is
    left for the caller to turn into a response.
    """
    data = {"name": _clean_name(name), "email": _clean_email(email)}
    row = user_repo.typed(conn).create(data)
    log.set_entity("USER", row["id"] if row else None)
    log.set_after(row)
    return row


def update_user(conn: Connection, user_id: int, log: LogContext, *, name: str | None = None,
                email: str | None = None) -> dict:
    """
    Update editable fields of a user. Only the fields passed are written;
    created_at is never touched.
    Returns the re-fetched row.
    """
    if name is None and email is None:
        raise ValueError("at least one of name/email must be provided")

    users = user_repo.typed(conn)
    before = users.get_by_id(user_id)
    if before is None:
        raise UserNotFound("user_not_found")

    data: dict[UserColumn, str] = {}
    if name is not None:
        data[UserColumn.NAME] = _clean_name(name)
    if email is not None:
        data[UserColumn.EMAIL] = _clean_email(email)

    after = users.update(user_id, data)
    if after is None:
        # deleted by someone else between the write and the read-back
        raise UserNotFound("user_not_found")

    log.set_entity("USER", user_id)
    log.set_before(before)
    log.set_after(after)
    return after


def delete_user(conn: Connection, user_id: int, log: LogContext) -> bool:
    users = user_repo.typed(conn)
    before = users.get_by_id(user_id)
    deleted = users.delete(user_id)
    log.set_entity("USER", user_id)
    log.set_before(before)
    return deleted


def seed_load(conn: Connection, users_csv: str, log: LogContext) -> dict:
    """Import users from a CSV with `name,email` columns.
    Rows whose email already exists are skipped.
    """
    df = pd.read_csv(users_csv, dtype=str).fillna("")
    missing = {"name", "email"} - set(df.columns)
    if missing:
        raise ValueError(f"csv_missing_columns: {sorted(missing)}")

    users = user_repo.typed(conn)
    created = 0
    skipped = 0
    for _, r in df.iterrows():
        name = _clean_name(str(r["name"]))
        email = _clean_email(str(r["email"]))
        if users.find_one_by(UserColumn.EMAIL, email) is not None:
            skipped += 1
            continue
        users.create({UserColumn.NAME: name, UserColumn.EMAIL: email})
        created += 1

    res = {"created": created, "skipped": skipped}
    log.set_payload({"users_csv": users_csv})
    log.set_after(res)
    return res
