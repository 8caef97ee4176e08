from sqlite3 import Connection

from fastapi import APIRouter, Request

from .. import __version__

router = APIRouter()


def get_db(request: Request) -> Connection:
    """Process-wide handle opened in the app startup hook."""
    return request.app.state.db


@router.get("/health")
def health():
    return {"status": "ok"}

@router.get("/version")
def version():
    return {"app": "record-admin-api", "version": __version__}
