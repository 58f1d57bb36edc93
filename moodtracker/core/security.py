"""Password hashing and JWT helpers."""

from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt

from moodtracker.core.config import Settings

# bcrypt only reads the first 72 bytes; newer releases raise instead of truncating
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode()


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode())
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(config: Settings, subject: str | int, extra: dict[str, Any] | None = None) -> str:
    """Sign a token for subject that expires after ``config.jwt_expire_minutes``."""
    issued_at = datetime.now(timezone.utc)
    claims: dict[str, Any] = {
        **(extra or {}),
        "sub": str(subject),
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=config.jwt_expire_minutes),
    }
    return jwt.encode(claims, config.jwt_secret, algorithm=config.jwt_algorithm)


def decode_access_token(config: Settings, token: str) -> dict[str, Any] | None:
    """Return the verified claims, or None for a bad signature, bad format or expired token."""
    try:
        return jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
    except JWTError:
        return None
