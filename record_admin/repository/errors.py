from __future__ import annotations


class RecordStoreError(ValueError):
    """Caller passed something the record store refuses to turn into SQL."""


class EmptyUpdatePayload(RecordStoreError):
    def __init__(self, table: str, op: str):
        super().__init__(f"{op} on {table} needs at least one column")
        self.table = table
        self.op = op


class InvalidIdentifier(RecordStoreError):
    def __init__(self, table: str, name: object):
        super().__init__(f"unknown column for {table}: {name!r}")
        self.table = table
        self.name = name
