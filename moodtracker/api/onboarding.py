"""Onboarding API."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError

from moodtracker.core.config import Settings
from moodtracker.core.deps import build_auth_dependency, build_body_reader
from moodtracker.core.responses import ApiError, success, unwrap
from moodtracker.core.validation import parse_pagination
from moodtracker.schemas.onboarding import OnboardingStartRequest, OnboardingStepUpdate
from moodtracker.services.auth_service import AuthIdentity, AuthService
from moodtracker.services.onboarding_service import SqlOnboardingService

logger = logging.getLogger(__name__)

_MISSING_ERRORS = {"missing", "string_too_short"}


def _start_request_from(body: dict[str, Any]) -> OnboardingStartRequest:
    try:
        return OnboardingStartRequest.model_validate(body)
    except ValidationError as exc:
        errors = exc.errors()
        missing = [str(error["loc"][0]) for error in errors if error["type"] in _MISSING_ERRORS]
        if missing:
            raise ApiError(400, "Missing required fields", details=missing) from exc
        if any(error["type"] == "string_too_long" for error in errors):
            raise ApiError(400, "Field values too long") from exc
        raise ApiError(400, "Invalid data types") from exc


def _step_update_from(body: dict[str, Any]) -> OnboardingStepUpdate:
    try:
        return OnboardingStepUpdate.model_validate(body)
    except ValidationError as exc:
        raise ApiError(400, "Invalid data types") from exc


def build_onboarding_router(
    auth_service: AuthService,
    onboarding_service: SqlOnboardingService,
    config: Settings,
) -> APIRouter:
    router = APIRouter(prefix="/onboarding", tags=["onboarding"])
    current_identity = build_auth_dependency(auth_service)
    json_body = build_body_reader(config.max_body_bytes)

    Identity = Annotated[AuthIdentity, Depends(current_identity)]
    Body = Annotated[dict[str, Any], Depends(json_body)]

    def call(operation: str, *args: Any) -> Any:
        try:
            result = getattr(onboarding_service, operation)(*args)
        except Exception as exc:
            logger.exception("OnboardingService.%s raised", operation)
            raise ApiError(500, "Internal server error") from exc
        return unwrap(result)

    @router.post("/start", status_code=201)
    def start(identity: Identity, body: Body):
        """Record profile details and create the onboarding steps."""
        profile = _start_request_from(body)
        started = call("start_onboarding", identity.user_id, profile)
        return success(started, status_code=201, message="Onboarding started successfully")

    @router.get("/steps")
    def list_steps(
        identity: Identity,
        page: Annotated[str | None, Query()] = None,
        limit: Annotated[str | None, Query()] = None,
    ):
        pagination = parse_pagination(page, limit, default_limit=config.default_page_size, max_limit=config.max_page_size)
        steps_page = call("list_steps", identity.user_id, pagination.page, pagination.limit)
        return success(steps_page)

    @router.put("/steps/{step_id}")
    def update_step(step_id: str, identity: Identity, body: Body):
        if not step_id.isdigit():
            raise ApiError(400, "Invalid step ID")
        update = _step_update_from(body)
        step = call("update_step", int(step_id), identity.user_id, update)
        return success(step, message="Step updated successfully")

    @router.post("/complete")
    def complete(identity: Identity):
        user = call("complete_onboarding", identity.user_id)
        return success(user, message="Onboarding completed successfully")

    return router
