"""moodtracker FastAPI application.

Run with ``uvicorn moodtracker.main:create_app --factory``.
"""

from __future__ import annotations

import functools
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from moodtracker.api.activities import ActivitySuggester, build_activities_router
from moodtracker.api.auth import build_auth_router
from moodtracker.api.mood import build_mood_router
from moodtracker.api.onboarding import build_onboarding_router
from moodtracker.core.config import Settings, settings as default_settings
from moodtracker.core.responses import install_exception_handlers
from moodtracker.db.session import build_engine, build_session_factory, create_tables
from moodtracker.services.ai_service import suggest_activities
from moodtracker.services.auth_service import JwtAuthService
from moodtracker.services.mood_service import MoodService, SqlMoodService
from moodtracker.services.onboarding_service import SqlOnboardingService


def create_app(
    config: Settings | None = None,
    auth_service: JwtAuthService | None = None,
    mood_service: MoodService | None = None,
    onboarding_service: SqlOnboardingService | None = None,
    activity_suggester: ActivitySuggester | None = None,
) -> FastAPI:
    """Build the app; any service not passed in is built from config."""
    config = config or default_settings

    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if auth_service is None or mood_service is None or onboarding_service is None:
        engine = build_engine(config.database_url, echo=config.debug)
        if config.database_url.startswith("sqlite"):
            create_tables(engine)
        session_factory = build_session_factory(engine)
        auth_service = auth_service or JwtAuthService(session_factory, config)
        mood_service = mood_service or SqlMoodService(session_factory)
        onboarding_service = onboarding_service or SqlOnboardingService(session_factory)
    if activity_suggester is None:
        activity_suggester = functools.partial(suggest_activities, config=config)

    app = FastAPI(
        title=config.app_name,
        debug=config.debug,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
        allow_credentials=True,
    )
    install_exception_handlers(app)

    @app.get("/health", tags=["health"])
    def health() -> dict:
        """Liveness probe; sits outside the API prefix and the envelope."""
        return {"status": "ok"}

    app.include_router(build_auth_router(auth_service), prefix=config.api_prefix)
    app.include_router(build_mood_router(auth_service, mood_service, config), prefix=config.api_prefix)
    app.include_router(
        build_onboarding_router(auth_service, onboarding_service, config),
        prefix=config.api_prefix,
    )
    app.include_router(
        build_activities_router(auth_service, activity_suggester, config),
        prefix=config.api_prefix,
    )
    return app
