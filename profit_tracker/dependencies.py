"""
FastAPI dependency injection.
Simple setup - just database and session management.
"""

from datetime import date
from typing import Optional
from fastapi import HTTPException, Query, Request

from .config import settings
from .db import SQLiteDatabase
from .auth import AuthContext, AuthError, SessionManager
from .metrics import DateWindow


# Global instances (initialized on startup)
_db: Optional[SQLiteDatabase] = None
_session_manager: Optional[SessionManager] = None


async def init_dependencies():
    """Initialize global dependencies. Called on app startup."""
    global _db, _session_manager

    _db = SQLiteDatabase(settings.database_path)
    await _db.initialize()

    _session_manager = SessionManager(settings.session_secret)


async def close_dependencies():
    """Close global dependencies. Called on app shutdown."""
    global _db
    if _db:
        await _db.close()
        _db = None


def get_db() -> SQLiteDatabase:
    """Get the database instance."""
    if _db is None:
        raise RuntimeError("Database not initialized")
    return _db


def get_session_manager() -> SessionManager:
    """Get the session manager instance."""
    if _session_manager is None:
        raise RuntimeError("Session manager not initialized")
    return _session_manager


def require_user(request: Request) -> AuthContext:
    """
    Dependency that requires a signed-in user.
    Raises 401 if there is none.
    """
    try:
        return get_session_manager().require_user(request)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))


def get_window(
    start: Optional[date] = Query(None, alias="from"),
    end: Optional[date] = Query(None, alias="to"),
) -> DateWindow:
    """Date window from ?from=YYYY-MM-DD&to=YYYY-MM-DD; no 'from' means all time."""
    if start and end and start > end:
        raise HTTPException(status_code=422, detail="'from' must not be after 'to'")
    return DateWindow(start=start, end=end)
