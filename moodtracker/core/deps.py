"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Annotated, Any

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from moodtracker.core.responses import AUTH_STATUS, ApiError, unwrap
from moodtracker.services.auth_service import AuthIdentity, AuthService

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def build_auth_dependency(auth_service: AuthService) -> Callable[..., AuthIdentity]:
    """Dependency resolving the bearer token to the caller's identity."""

    def get_current_identity(
        request: Request,
        credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    ) -> AuthIdentity:
        if not request.headers.get("Authorization", "").strip():
            raise ApiError(401, "Authorization header required", headers=_BEARER_CHALLENGE)
        if credentials is None:
            # Header present but not "Bearer <token>"
            raise ApiError(401, "Invalid token", headers=_BEARER_CHALLENGE)
        try:
            result = auth_service.validate_token(credentials.credentials)
        except Exception as exc:
            logger.exception("Token validation raised")
            raise ApiError(500, "Internal server error") from exc
        return unwrap(result, AUTH_STATUS)

    return get_current_identity


def _is_json(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


def build_body_reader(max_bytes: int) -> Callable[[Request], Awaitable[dict[str, Any]]]:
    """Dependency reading a JSON object body; an empty body reads as {}."""

    async def read_json_body(request: Request) -> dict[str, Any]:
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > max_bytes:
            raise ApiError(400, "Request payload too large")
        raw = await request.body()
        if len(raw) > max_bytes:
            raise ApiError(400, "Request payload too large")
        if not raw.strip():
            return {}
        if not _is_json(request.headers.get("content-type", "")):
            raise ApiError(400, "Content-Type must be application/json")
        try:
            body = json.loads(raw)
        except ValueError as exc:
            raise ApiError(400, "Invalid JSON in request body") from exc
        if not isinstance(body, dict):
            raise ApiError(400, "Request body must be a JSON object")
        return body

    return read_json_body
