"""
Authentication routes - signup/login/logout.
"""

import logging
import time
from collections import defaultdict

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..auth import MIN_PASSWORD_LENGTH, hash_password, verify_password
from ..db import PersistenceError, User
from ..dependencies import get_db, get_session_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

# Brute force protection: track failed login attempts by IP
failed_attempts = defaultdict(list)
LOCKOUT_THRESHOLD = 5  # Lock after 5 failed attempts
LOCKOUT_DURATION = 300  # 5 minutes in seconds


class Credentials(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=1)


class SignUpRequest(Credentials):
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)


@router.post("/signup", status_code=201)
async def signup(body: SignUpRequest):
    """Create an account."""
    db = get_db()
    email = body.email.lower()

    if await db.get_user_by_email(email):
        raise HTTPException(status_code=409, detail="An account with this email already exists")

    try:
        user = await db.create_user(User(email=email, password_hash=hash_password(body.password)))
    except PersistenceError:
        raise HTTPException(status_code=500, detail="Failed to create account. Please try again.")

    logger.info(f"Created account {user.id}")
    return {"id": user.id, "email": user.email}


@router.post("/login")
async def login(request: Request, body: Credentials):
    """Sign in with brute force protection."""
    session_manager = get_session_manager()
    client_ip = request.client.host if request.client else "unknown"
    current_time = time.time()

    # Clean up old attempts
    failed_attempts[client_ip] = [
        attempt_time for attempt_time in failed_attempts[client_ip]
        if current_time - attempt_time < LOCKOUT_DURATION
    ]

    if len(failed_attempts[client_ip]) >= LOCKOUT_THRESHOLD:
        remaining = int(LOCKOUT_DURATION - (current_time - failed_attempts[client_ip][0]))
        raise HTTPException(
            status_code=429,
            detail=f"Too many failed attempts. Try again in {remaining} seconds."
        )

    user = await get_db().get_user_by_email(body.email.lower())
    if user and verify_password(body.password, user.password_hash):
        failed_attempts.pop(client_ip, None)
        response = JSONResponse({"id": user.id, "email": user.email})
        session_manager.create_session(response, user.id, user.email)
        return response

    failed_attempts[client_ip].append(current_time)
    raise HTTPException(status_code=401, detail="Invalid email or password")


@router.post("/logout")
async def logout():
    """Sign out."""
    response = JSONResponse({"message": "Signed out"})
    get_session_manager().clear_session(response)
    return response
