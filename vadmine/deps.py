"""Shared FastAPI dependencies."""

from fastapi import Request

from vadmine.core.clock import Clock
from vadmine.core.exceptions import NotAuthenticatedError
from vadmine.core.logging import bind_uid
from vadmine.core.security import load_session_cookie
from vadmine.storage.base import LedgerStore

SESSION_COOKIE_NAME = "vadmine_session"


def get_ledger_store(request: Request) -> LedgerStore:
    """Dependency: the ledger store constructed at startup."""
    return request.app.state.ledger_store


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


async def get_current_uid(request: Request) -> str:
    """Dependency: load session from cookie and return the signed-in uid."""
    cookie = request.cookies.get(SESSION_COOKIE_NAME)
    if not cookie:
        raise NotAuthenticatedError("Not authenticated")
    payload = load_session_cookie(cookie)
    if not payload:
        raise NotAuthenticatedError("Invalid or expired session")
    uid = payload.get("uid")
    if not uid:
        raise NotAuthenticatedError("Invalid session")
    bind_uid(uid)
    return uid
