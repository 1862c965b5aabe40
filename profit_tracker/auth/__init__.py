"""
Authentication module.
"""

from profit_tracker.auth.password import hash_password, verify_password, MIN_PASSWORD_LENGTH
from profit_tracker.auth.session import (
    SessionManager,
    AuthContext,
    AuthError,
    SESSION_COOKIE_NAME,
)

__all__ = [
    "hash_password",
    "verify_password",
    "MIN_PASSWORD_LENGTH",
    "SessionManager",
    "AuthContext",
    "AuthError",
    "SESSION_COOKIE_NAME",
]
