"""Auth endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from moodtracker.core.deps import build_auth_dependency
from moodtracker.core.responses import AUTH_STATUS, success, unwrap
from moodtracker.schemas.auth import LoginRequest, RegisterRequest
from moodtracker.services.auth_service import AuthIdentity, JwtAuthService


def build_auth_router(auth_service: JwtAuthService) -> APIRouter:
    router = APIRouter(prefix="/auth", tags=["auth"])
    current_identity = build_auth_dependency(auth_service)

    @router.post("/register", status_code=201)
    def register(data: RegisterRequest):
        """Register a new user."""
        user = unwrap(auth_service.register_user(data))
        return success(user, status_code=201)

    @router.post("/login")
    def login(data: LoginRequest):
        """Login and return access token."""
        token = unwrap(auth_service.authenticate(data.email, data.password), AUTH_STATUS)
        return success(token)

    @router.get("/me")
    def me(identity: Annotated[AuthIdentity, Depends(current_identity)]):
        """Get current authenticated user."""
        user = unwrap(auth_service.get_user(identity.user_id))
        return success(user)

    return router
