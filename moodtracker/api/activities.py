"""Activity suggestions API."""

import logging
from collections.abc import Callable
from typing import Annotated, Any

from fastapi import APIRouter, Depends

from moodtracker.core.config import Settings
from moodtracker.core.deps import build_auth_dependency, build_body_reader
from moodtracker.core.moods import MoodType
from moodtracker.core.responses import ApiError, success
from moodtracker.core.validation import validate_mood_type
from moodtracker.schemas.activities import ActivitySuggestionsOut
from moodtracker.services.ai_service import AIServiceError
from moodtracker.services.auth_service import AuthIdentity, AuthService

logger = logging.getLogger(__name__)

ActivitySuggester = Callable[[MoodType], list[str]]


def build_activities_router(
    auth_service: AuthService,
    suggest: ActivitySuggester,
    config: Settings,
) -> APIRouter:
    router = APIRouter(prefix="/activities", tags=["activities"])
    current_identity = build_auth_dependency(auth_service)
    json_body = build_body_reader(config.max_body_bytes)

    @router.post("")
    def suggest_activities(
        identity: Annotated[AuthIdentity, Depends(current_identity)],
        body: Annotated[dict[str, Any], Depends(json_body)],
    ):
        """Ask the AI provider for activities suited to a mood."""
        mood = validate_mood_type(body.get("mood"))
        try:
            suggestions = suggest(mood)
        except AIServiceError as exc:
            logger.exception("Activity suggestions failed user_id=%s mood=%s", identity.user_id, mood.value)
            raise ApiError(502, "Unable to fetch activity suggestions") from exc
        return success(ActivitySuggestionsOut(mood=mood, suggestions=suggestions))

    return router
