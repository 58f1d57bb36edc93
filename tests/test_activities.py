"""Activity suggestion endpoint tests."""

from fastapi.testclient import TestClient

from moodtracker.core.moods import MoodType
from moodtracker.main import create_app
from moodtracker.services.ai_service import AIServiceError
from tests.conftest import FAKE_SUGGESTIONS, TEST_SETTINGS


def test_suggestions_for_mood(client, auth_headers, suggester):
    response = client.post("/api/activities", json={"mood": "anxious"}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": {"mood": "ANXIOUS", "suggestions": FAKE_SUGGESTIONS},
    }
    assert suggester.calls == [MoodType.ANXIOUS]


def test_invalid_mood_rejected_before_provider_call(client, auth_headers, suggester):
    response = client.post("/api/activities", json={"mood": "GRUMPY"}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid mood type"}
    assert suggester.calls == []


def test_provider_failure_maps_to_502(auth_service, mood_service, onboarding_service):
    def failing_suggester(mood):
        raise AIServiceError("provider unavailable")

    app = create_app(
        TEST_SETTINGS,
        auth_service=auth_service,
        mood_service=mood_service,
        onboarding_service=onboarding_service,
        activity_suggester=failing_suggester,
    )
    with TestClient(app) as client:
        client.post(
            "/api/auth/register",
            json={"email": "ai@test.com", "password": "secret123", "fullName": "AI"},
        )
        token = client.post(
            "/api/auth/login", json={"email": "ai@test.com", "password": "secret123"}
        ).json()["data"]["accessToken"]

        response = client.post(
            "/api/activities",
            json={"mood": "SAD"},
            headers={"Authorization": f"Bearer {token}"},
        )

    assert response.status_code == 502
    assert response.json() == {"success": False, "error": "Unable to fetch activity suggestions"}


def test_suggestions_require_auth(client):
    response = client.post("/api/activities", json={"mood": "SAD"})
    assert response.status_code == 401
