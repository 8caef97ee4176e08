from __future__ import annotations

import sqlite3
from sqlite3 import Connection

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ..logs import LogContext
from ..services.user_svc import (
    UserNotFound,
    create_user,
    delete_user,
    find_users,
    get_user,
    list_users,
    update_user,
    user_stats,
)
from .base import get_db

router = APIRouter()


class UserCreate(BaseModel):
    name: str
    email: str


class UserUpdate(BaseModel):
    id: int
    name: str | None = None
    email: str | None = None


class UserDelete(BaseModel):
    id: int


class UserAction(BaseModel):
    intent: str  # create/update/delete
    id: int | None = None
    name: str | None = None
    email: str | None = None


def _error(conn: Connection, log: LogContext, e: Exception) -> HTTPException:
    log.write(conn, "ERROR", str(e))
    if isinstance(e, sqlite3.IntegrityError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, ValueError):
        code = 404 if isinstance(e, UserNotFound) else 400
        return HTTPException(status_code=code, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


@router.get("/api/users/list")
def api_users_list(conn: Connection = Depends(get_db)):
    items = list_users(conn)
    return {"total": user_stats(conn)["total"], "items": items}


@router.get("/api/users/get/{user_id}")
def api_users_get(user_id: int, conn: Connection = Depends(get_db)):
    try:
        return get_user(conn, user_id)
    except UserNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/api/users/find")
def api_users_find(
    column: str = Query(...),
    value: str = Query(...),
    conn: Connection = Depends(get_db),
):
    try:
        return {"items": find_users(conn, column, value)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/api/users/create", status_code=201)
def api_users_create(body: UserCreate, conn: Connection = Depends(get_db)):
    log = LogContext("CREATE_USER")
    log.set_payload(body.model_dump())
    try:
        row = create_user(conn, body.name, body.email, log)
        log.write(conn, "OK")
        return {"message": "ok", "user": row}
    except Exception as e:
        raise _error(conn, log, e)


@router.post("/api/users/update")
def api_users_update(body: UserUpdate, conn: Connection = Depends(get_db)):
    log = LogContext("UPDATE_USER")
    log.set_payload(body.model_dump())
    try:
        row = update_user(conn, body.id, log, name=body.name, email=body.email)
        log.write(conn, "OK")
        return {"message": "ok", "user": row}
    except Exception as e:
        raise _error(conn, log, e)


@router.post("/api/users/delete")
def api_users_delete(body: UserDelete, conn: Connection = Depends(get_db)):
    log = LogContext("DELETE_USER")
    log.set_payload(body.model_dump())
    try:
        deleted = delete_user(conn, body.id, log)
        log.write(conn, "OK")
        return {"message": "ok", "deleted": deleted}
    except Exception as e:
        raise _error(conn, log, e)


@router.post("/api/users/action")
def api_users_action(body: UserAction, conn: Connection = Depends(get_db)):
    """Single entry point for form-style submissions: dispatch on `intent`."""
    if body.intent == "create":
        if body.name is None or body.email is None:
            raise HTTPException(status_code=400, detail="name and email are required")
        return api_users_create(UserCreate(name=body.name, email=body.email), conn)
    if body.intent == "update":
        if body.id is None:
            raise HTTPException(status_code=400, detail="id is required")
        return api_users_update(UserUpdate(id=body.id, name=body.name, email=body.email), conn)
    if body.intent == "delete":
        if body.id is None:
            raise HTTPException(status_code=400, detail="id is required")
        return api_users_delete(UserDelete(id=body.id), conn)
    raise HTTPException(status_code=400, detail=f"unknown intent: {body.intent}")
