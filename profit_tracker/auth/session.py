"""
Cookie-based session management.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from fastapi import Request, Response
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired


# Session duration: 24 hours
SESSION_MAX_AGE = 24 * 60 * 60  # seconds
SESSION_COOKIE_NAME = "session"


class AuthError(Exception):
    """No signed-in user for an owner-scoped operation."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


@dataclass(frozen=True)
class AuthContext:
    """The signed-in user, passed explicitly to owner-scoped operations."""
    user_id: str
    email: str


class SessionManager:
    """Manages signed cookie-based sessions."""

    def __init__(self, secret_key: str):
        """
        Initialize session manager.

        Args:
            secret_key: Secret key for signing cookies
        """
        self._serializer = URLSafeTimedSerializer(secret_key)

    def create_session(self, response: Response, user_id: str, email: str) -> None:
        """
        Create a new session and set the cookie.

        Args:
            response: FastAPI response object
            user_id: Id of the signed-in user
            email: Email of the signed-in user
        """
        session_data = {
            "user_id": user_id,
            "email": email,
            "created_at": datetime.utcnow().isoformat(),
        }

        token = self._serializer.dumps(session_data)

        response.set_cookie(
            key=SESSION_COOKIE_NAME,
            value=token,
            max_age=SESSION_MAX_AGE,
            httponly=True,  # Not accessible via JavaScript
            samesite="lax",  # CSRF protection
            secure=False,  # Set to True in production with HTTPS
        )

    def get_session(self, request: Request) -> Optional[dict]:
        """
        Get session data from request cookie.

        Returns:
            Session data dict or None if invalid/expired
        """
        token = request.cookies.get(SESSION_COOKIE_NAME)
        if not token:
            return None

        try:
            return self._serializer.loads(token, max_age=SESSION_MAX_AGE)
        except (BadSignature, SignatureExpired):
            return None

    def clear_session(self, response: Response) -> None:
        response.delete_cookie(
            key=SESSION_COOKIE_NAME,
            httponly=True,
            samesite="lax",
        )

    def get_user(self, request: Request) -> Optional[AuthContext]:
        session = self.get_session(request)
        if not session or not session.get("user_id"):
            return None
        return AuthContext(user_id=session["user_id"], email=session.get("email", ""))

    def require_user(self, request: Request) -> AuthContext:
        """
        Return the signed-in user.

        Raises:
            AuthError: If the request has no valid session
        """
        user = self.get_user(request)
        if user is None:
            raise AuthError()
        return user
