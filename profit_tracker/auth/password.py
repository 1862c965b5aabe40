"""
Password hashing.
"""

from passlib.hash import bcrypt


MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    return bcrypt.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a bcrypt hash; malformed hashes never match."""
    try:
        return bcrypt.verify(password, password_hash)
    except ValueError:
        return False
