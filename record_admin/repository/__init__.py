"""Repository layer: DB access helpers (SQLite).

BaseModel is the generic per-table store; table clients such as user_repo
bind it to a concrete table.
"""
from __future__ import annotations

from .base_model import BaseModel
from .errors import EmptyUpdatePayload, InvalidIdentifier, RecordStoreError

__all__ = ["BaseModel", "EmptyUpdatePayload", "InvalidIdentifier", "RecordStoreError"]
