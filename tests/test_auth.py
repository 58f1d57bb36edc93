"""Auth endpoint tests."""


def test_register_and_login_happy_path(client):
    """Register -> login -> /me works."""
    reg = client.post(
        "/api/auth/register",
        json={"email": "Person@Test.com", "password": "secret123", "fullName": "Test Person"},
    )
    assert reg.status_code == 201
    data = reg.json()["data"]
    assert data["email"] == "person@test.com"
    assert data["fullName"] == "Test Person"
    assert data["onboardingCompleted"] is False
    assert "hashedPassword" not in data

    login = client.post("/api/auth/login", json={"email": "person@test.com", "password": "secret123"})
    assert login.status_code == 200
    token = login.json()["data"]["accessToken"]
    assert login.json()["data"]["tokenType"] == "bearer"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["data"]["id"] == data["id"]


def test_duplicate_email_conflicts(client):
    body = {"email": "dup@test.com", "password": "secret123", "fullName": "Dup"}
    assert client.post("/api/auth/register", json=body).status_code == 201

    response = client.post("/api/auth/register", json=body)

    assert response.status_code == 409
    assert response.json() == {"success": False, "error": "Email already registered"}


def test_wrong_password_fails(client):
    client.post("/api/auth/register", json={"email": "fail@test.com", "password": "right-one", "fullName": "F"})

    login = client.post("/api/auth/login", json={"email": "fail@test.com", "password": "wrong-one"})

    assert login.status_code == 401
    assert login.json() == {"success": False, "error": "Invalid email or password"}


def test_register_validation_errors_use_envelope(client):
    response = client.post("/api/auth/register", json={"email": "not-an-email", "password": "x"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Invalid request"
    fields = {detail["field"] for detail in body["details"]}
    assert {"email", "password", "fullName"} <= fields


def test_me_requires_auth(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Authorization header required"}
