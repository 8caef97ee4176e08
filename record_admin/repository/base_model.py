"""Generic per-table record store.

One instance per table. Table and column names are interpolated into the SQL
text, values always go through `?` placeholders. Without a column allow-list
the caller is trusted to pass real identifiers; a bad one surfaces as
sqlite3.OperationalError.
"""
from __future__ import annotations

import re
from enum import Enum
from sqlite3 import Connection, Cursor
from typing import Any, Generic, Iterable, Mapping, Optional, Type, TypeVar

from .errors import EmptyUpdatePayload, InvalidIdentifier

T = TypeVar("T")

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class BaseModel(Generic[T]):
    def __init__(self, conn: Connection, table_name: str, columns: Optional[Type[Enum]] = None):
        if columns is not None and not _IDENT_RE.match(table_name):
            raise InvalidIdentifier(table_name, table_name)
        self._conn = conn
        self._table = table_name
        self._columns = columns

    @property
    def table_name(self) -> str:
        return self._table

    def _ident(self, name: Any) -> str:
        if self._columns is None:
            return name.value if isinstance(name, Enum) else str(name)
        if isinstance(name, self._columns):
            return str(name.value)
        try:
            return str(self._columns(name).value)
        except ValueError:
            raise InvalidIdentifier(self._table, name) from None

    def _split(self, data: Mapping[Any, Any], op: str) -> tuple[list[str], list[Any]]:
        if not data:
            raise EmptyUpdatePayload(self._table, op)
        keys = [self._ident(k) for k in data.keys()]
        return keys, list(data.values())

    # ---- reads ----

    def get_all(self) -> list[T]:
        return self.query(f"SELECT * FROM {self._table} ORDER BY id DESC")

    def get_by_id(self, id: Any) -> Optional[T]:
        return self.query_one(f"SELECT * FROM {self._table} WHERE id = ?", (id,))

    def find_by(self, column: Any, value: Any) -> list[T]:
        col = self._ident(column)
        return self.query(f"SELECT * FROM {self._table} WHERE {col} = ?", (value,))

    def find_one_by(self, column: Any, value: Any) -> Optional[T]:
        col = self._ident(column)
        return self.query_one(f"SELECT * FROM {self._table} WHERE {col} = ?", (value,))

    def exists(self, id: Any) -> bool:
        return self.get_by_id(id) is not None

    def count(self) -> int:
        row = self._conn.execute(f"SELECT COUNT(*) FROM {self._table}").fetchone()
        return int(row[0])

    # ---- writes ----

    def delete(self, id: Any) -> bool:
        cur = self._conn.execute(f"DELETE FROM {self._table} WHERE id = ?", (id,))
        return cur.rowcount > 0

    def create(self, data: Mapping[Any, Any]) -> Optional[T]:
        """Insert `data` (column -> value, in key order) and re-fetch the new row.

        The insert and the re-fetch are separate statements; a concurrent delete
        in between yields None.
        """
        keys, values = self._split(data, "create")
        placeholders = ", ".join(["?"] * len(keys))
        cur = self._conn.execute(
            f"INSERT INTO {self._table} ({', '.join(keys)}) VALUES ({placeholders})",
            values,
        )
        return self.get_by_id(cur.lastrowid)

    def update(self, id: Any, data: Mapping[Any, Any]) -> Optional[T]:
        keys, values = self._split(data, "update")
        set_clause = ", ".join(f"{k} = ?" for k in keys)
        self._conn.execute(
            f"UPDATE {self._table} SET {set_clause} WHERE id = ?",
            (*values, id),
        )
        return self.get_by_id(id)

    # ---- raw ----

    @staticmethod
    def _as_dict(cur: Cursor, row: Any) -> dict:
        # independent of the connection's row_factory
        return dict(zip([d[0] for d in cur.description], row))

    def query(self, sql: str, params: Iterable[Any] = ()) -> list[T]:
        cur = self._conn.execute(sql, tuple(params))
        return [self._as_dict(cur, r) for r in cur.fetchall()]  # type: ignore[misc]

    def query_one(self, sql: str, params: Iterable[Any] = ()) -> Optional[T]:
        cur = self._conn.execute(sql, tuple(params))
        row = cur.fetchone()
        return self._as_dict(cur, row) if row is not None else None  # type: ignore[return-value]
