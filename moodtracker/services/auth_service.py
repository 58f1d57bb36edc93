"""Auth service: token validation, registration and login."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from moodtracker.core.config import Settings
from moodtracker.core.result import Err, ErrorKind, Ok, Result
from moodtracker.core.security import create_access_token, decode_access_token, hash_password, verify_password
from moodtracker.models.user import User
from moodtracker.schemas.auth import RegisterRequest, TokenResponse, UserOut

logger = logging.getLogger(__name__)

INVALID_TOKEN = "Invalid token"
INVALID_CREDENTIALS = "Invalid email or password"


@dataclass(frozen=True)
class AuthIdentity:
    user_id: int


class AuthService(Protocol):
    def validate_token(self, token: str) -> Result[AuthIdentity]: ...


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get user by email."""
    return db.execute(select(User).where(User.email == email.lower())).scalar_one_or_none()


class JwtAuthService:
    """AuthService backed by HS256 JWTs and the users table."""

    def __init__(self, session_factory: sessionmaker[Session], config: Settings):
        self._session_factory = session_factory
        self._config = config

    def validate_token(self, token: str) -> Result[AuthIdentity]:
        payload = decode_access_token(self._config, token)
        if not payload or "sub" not in payload:
            logger.warning("Rejected bearer token: undecodable or expired")
            return Err(ErrorKind.UNAUTHORIZED, INVALID_TOKEN)
        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError):
            logger.warning("Rejected bearer token: malformed subject")
            return Err(ErrorKind.UNAUTHORIZED, INVALID_TOKEN)

        try:
            with self._session_factory() as db:
                user = db.get(User, user_id)
        except SQLAlchemyError:
            logger.exception("Token user lookup failed user_id=%s", user_id)
            return Err(ErrorKind.INTERNAL, "Internal server error")

        if not user or not user.is_active:
            logger.warning("Rejected bearer token: unknown or inactive user_id=%s", user_id)
            return Err(ErrorKind.UNAUTHORIZED, INVALID_TOKEN)
        return Ok(AuthIdentity(user_id=user.id))

    def register_user(self, data: RegisterRequest) -> Result[UserOut]:
        """Create a new user."""
        with self._session_factory() as db:
            if get_user_by_email(db, data.email):
                return Err(ErrorKind.CONFLICT, "Email already registered")
            user = User(
                email=data.email.lower(),
                hashed_password=hash_password(data.password),
                full_name=data.full_name.strip(),
            )
            db.add(user)
            try:
                db.commit()
            except IntegrityError:
                # Lost a race with a concurrent registration
                db.rollback()
                return Err(ErrorKind.CONFLICT, "Email already registered")
            db.refresh(user)
            logger.info("User registered user_id=%s", user.id)
            return Ok(UserOut.model_validate(user))

    def authenticate(self, email: str, password: str) -> Result[TokenResponse]:
        """Check credentials and issue an access token."""
        with self._session_factory() as db:
            user = get_user_by_email(db, email)
        if not user or not verify_password(password, user.hashed_password):
            return Err(ErrorKind.UNAUTHORIZED, INVALID_CREDENTIALS)
        if not user.is_active:
            return Err(ErrorKind.UNAUTHORIZED, INVALID_CREDENTIALS)
        token = create_access_token(self._config, subject=user.id)
        return Ok(TokenResponse(access_token=token))

    def get_user(self, user_id: int) -> Result[UserOut]:
        with self._session_factory() as db:
            user = db.get(User, user_id)
        if not user:
            return Err(ErrorKind.NOT_FOUND, "User not found")
        return Ok(UserOut.model_validate(user))
