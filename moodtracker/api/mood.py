"""Mood entries API."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from moodtracker.core.config import Settings
from moodtracker.core.deps import build_auth_dependency, build_body_reader
from moodtracker.core.responses import ApiError, success, unwrap
from moodtracker.core.result import Result
from moodtracker.core.validation import (
    parse_analytics_query,
    parse_create_request,
    parse_list_query,
    parse_update_request,
    validate_id_format,
)
from moodtracker.services.auth_service import AuthIdentity, AuthService
from moodtracker.services.mood_service import MoodService

logger = logging.getLogger(__name__)


def build_mood_router(auth_service: AuthService, mood_service: MoodService, config: Settings) -> APIRouter:
    """Mood CRUD + analytics routes bound to the given services.

    Each handler runs auth, then input validation, then one service call,
    and maps the service result onto the response envelope.
    """
    router = APIRouter(prefix="/mood", tags=["mood"])
    current_identity = build_auth_dependency(auth_service)
    json_body = build_body_reader(config.max_body_bytes)

    Identity = Annotated[AuthIdentity, Depends(current_identity)]
    Body = Annotated[dict[str, Any], Depends(json_body)]

    def call(operation: str, *args: Any) -> Any:
        try:
            result: Result = getattr(mood_service, operation)(*args)
        except Exception as exc:
            logger.exception("MoodService.%s raised", operation)
            raise ApiError(500, "Internal server error") from exc
        return unwrap(result)

    @router.get("")
    def list_entries(
        identity: Identity,
        start_date: Annotated[str | None, Query(alias="startDate")] = None,
        end_date: Annotated[str | None, Query(alias="endDate")] = None,
        mood_type: Annotated[str | None, Query(alias="moodType")] = None,
        page: Annotated[str | None, Query()] = None,
        limit: Annotated[str | None, Query()] = None,
    ):
        """List the caller's entries, newest first."""
        query = parse_list_query(
            {
                "startDate": start_date,
                "endDate": end_date,
                "moodType": mood_type,
                "page": page,
                "limit": limit,
            },
            default_limit=config.default_page_size,
            max_limit=config.max_page_size,
        )
        entries = call(
            "get_mood_entries",
            identity.user_id,
            query.start_date,
            query.end_date,
            query.mood_type,
            query.page,
            query.limit,
        )
        return success(entries)

    @router.post("", status_code=201)
    def create_entry(identity: Identity, body: Body):
        request = parse_create_request(body)
        entry = call("create_mood_entry", identity.user_id, request.mood, request.note)
        return success(entry, status_code=201)

    # Declared before /{entry_id} so "analytics" is not read as an id
    @router.get("/analytics")
    def analytics(
        identity: Identity,
        start_date: Annotated[str | None, Query(alias="startDate")] = None,
        end_date: Annotated[str | None, Query(alias="endDate")] = None,
    ):
        query = parse_analytics_query({"startDate": start_date, "endDate": end_date})
        data = call("get_mood_analytics", identity.user_id, query.start_date, query.end_date)
        return success(data)

    @router.get("/{entry_id}")
    def get_entry(entry_id: str, identity: Identity):
        parsed_id = validate_id_format(entry_id)
        entry = call("get_mood_entry_by_id", parsed_id, identity.user_id)
        return success(entry)

    @router.put("/{entry_id}")
    def update_entry(entry_id: str, identity: Identity, body: Body):
        """Partial update; only supplied fields change."""
        request = parse_update_request(body)
        parsed_id = validate_id_format(entry_id)
        entry = call("update_mood_entry", parsed_id, identity.user_id, request.changes)
        return success(entry)

    @router.delete("/{entry_id}")
    def delete_entry(entry_id: str, identity: Identity):
        parsed_id = validate_id_format(entry_id)
        call("delete_mood_entry", parsed_id, identity.user_id)
        return success(message="Mood entry deleted successfully")

    return router
