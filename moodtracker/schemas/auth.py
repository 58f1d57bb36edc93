"""Auth schemas."""

from datetime import datetime

from pydantic import EmailStr, Field

from moodtracker.schemas.base import CamelModel


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class RegisterRequest(CamelModel):
    email: EmailStr
    # bcrypt only hashes the first 72 bytes
    password: str = Field(min_length=6, max_length=72)
    full_name: str = Field(min_length=1, max_length=255)


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"


class UserOut(CamelModel):
    id: int
    email: str
    full_name: str
    first_name: str | None = None
    last_name: str | None = None
    company: str | None = None
    role: str | None = None
    is_active: bool
    onboarding_completed: bool
    created_at: datetime
