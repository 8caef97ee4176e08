import os
import sys
import sqlite3
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "record_admin_test.db"
    # Point the app to this temp DB
    os.environ["RECORD_DB_PATH"] = str(path)
    from record_admin.db import close_db, init_db, open_db
    conn = open_db(str(path))
    try:
        init_db(conn, seed=False)
    finally:
        close_db(conn)
    return str(path)


@pytest.fixture()
def client(tmp_db_path):
    # Import app after DB ready so startup hooks can use it
    from record_admin.api import app
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def conn(tmp_path):
    """Fresh database seeded with the three fixture users (ids 1, 2, 3)."""
    from record_admin.db import close_db, init_db, open_db
    c = open_db(str(tmp_path / "store.db"))
    init_db(c, seed=True)
    yield c
    close_db(c)


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Clean tables before each test for isolation
    # Safety: ensure we only ever wipe the temp DB, never a real one
    assert os.environ.get("RECORD_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    conn = sqlite3.connect(tmp_db_path)
    try:
        for t in ("users", "operation_log"):
            conn.execute(f"DELETE FROM {t}")
        conn.commit()
    finally:
        conn.close()
    yield
