"""Pytest fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from moodtracker.core.config import Settings
from moodtracker.db.session import build_engine, build_session_factory, create_tables
from moodtracker.main import create_app
from moodtracker.services.auth_service import JwtAuthService
from moodtracker.services.mood_service import SqlMoodService
from moodtracker.services.onboarding_service import SqlOnboardingService

TEST_SETTINGS = Settings(
    database_url="sqlite://",
    jwt_secret="test-secret",
    debug=False,
)

FAKE_SUGGESTIONS = ["Take a short walk", "Call a friend", "Write down three good things"]


@pytest.fixture
def engine():
    """In-memory SQLite shared by every connection of one test."""
    engine = build_engine(TEST_SETTINGS.database_url, poolclass=StaticPool)
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def auth_service(session_factory):
    return JwtAuthService(session_factory, TEST_SETTINGS)


@pytest.fixture
def mood_service(session_factory):
    return SqlMoodService(session_factory)


@pytest.fixture
def onboarding_service(session_factory):
    return SqlOnboardingService(session_factory)


@pytest.fixture
def suggester():
    """Stand-in for the AI provider; records the moods it was asked about."""

    class FakeSuggester:
        def __init__(self):
            self.calls = []

        def __call__(self, mood):
            self.calls.append(mood)
            return list(FAKE_SUGGESTIONS)

    return FakeSuggester()


@pytest.fixture
def client(auth_service, mood_service, onboarding_service, suggester):
    """Test client over real services and an in-memory database."""
    app = create_app(
        TEST_SETTINGS,
        auth_service=auth_service,
        mood_service=mood_service,
        onboarding_service=onboarding_service,
        activity_suggester=suggester,
    )
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(client):
    """Register + login a user and return Authorization headers."""

    def _make_user(email: str = "user@test.com", password: str = "secret123", full_name: str = "Test User") -> dict:
        client.post(
            "/api/auth/register",
            json={"email": email, "password": password, "fullName": full_name},
        )
        token = client.post("/api/auth/login", json={"email": email, "password": password}).json()["data"]["accessToken"]
        return {"Authorization": f"Bearer {token}"}

    return _make_user


@pytest.fixture
def auth_headers(make_user):
    return make_user()
