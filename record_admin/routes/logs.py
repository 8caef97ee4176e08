from __future__ import annotations

from sqlite3 import Connection

from fastapi import APIRouter, Depends

from ..logs import search_operation_logs
from .base import get_db

router = APIRouter()


@router.get("/api/logs/search")
def api_logs_search(
    page: int = 1,
    size: int = 20,
    action: str | None = None,
    query: str | None = None,
    ts_from: str | None = None,
    ts_to: str | None = None,
    conn: Connection = Depends(get_db),
):
    total, items = search_operation_logs(conn, query, action, ts_from, ts_to, page, size)
    return {"total": total, "items": items}
