from __future__ import annotations

from fastapi.testclient import TestClient

from .helpers import PASSWORD, register


def test_register_returns_user_and_token(client: TestClient) -> None:
    response = client.post(
        "/api/auth/register",
        json={"name": "Carol", "email": "carol@example.com", "password": PASSWORD},
    )
    assert response.status_code == 201
    payload = response.json()
    assert payload["user"]["email"] == "carol@example.com"
    assert payload["user"]["name"] == "Carol"
    assert payload["token"]


def test_register_rejects_duplicate_email(client: TestClient) -> None:
    register(client, "dup@example.com")
    response = client.post(
        "/api/auth/register",
        json={"name": "Again", "email": "dup@example.com", "password": PASSWORD},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


def test_register_validates_password_length(client: TestClient) -> None:
    response = client.post(
        "/api/auth/register",
        json={"name": "Short", "email": "short@example.com", "password": "abc"},
    )
    assert response.status_code == 422


def test_login_and_me(client: TestClient) -> None:
    register(client, "dave@example.com", "Dave")

    response = client.post("/api/auth/login", json={"email": "dave@example.com", "password": PASSWORD})
    assert response.status_code == 200
    token = response.json()["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["name"] == "Dave"


def test_login_with_wrong_password(client: TestClient) -> None:
    register(client, "erin@example.com")
    response = client.post("/api/auth/login", json={"email": "erin@example.com", "password": "wrong-password"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_oauth2_token_form(client: TestClient) -> None:
    register(client, "frank@example.com")
    response = client.post("/api/auth/token", data={"username": "frank@example.com", "password": PASSWORD})
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


def test_requests_without_token_are_rejected(client: TestClient) -> None:
    assert client.get("/api/tasks").status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401


def test_update_profile(client: TestClient, alice: dict[str, str], bob: dict[str, str]) -> None:
    response = client.put("/api/auth/profile", json={"name": "Alice B."}, headers=alice)
    assert response.status_code == 200
    assert response.json()["user"]["name"] == "Alice B."

    taken = client.put("/api/auth/profile", json={"email": "bob@example.com"}, headers=alice)
    assert taken.status_code == 400
    assert taken.json()["detail"] == "Email already in use"


def test_check_email(client: TestClient, alice: dict[str, str]) -> None:
    taken = client.post("/api/auth/check-email", json={"email": "alice@example.com"})
    assert taken.json() == {"available": False, "message": "Email is already taken"}

    free = client.post("/api/auth/check-email", json={"email": "nobody@example.com"})
    assert free.json()["available"] is True


def test_logout(client: TestClient, alice: dict[str, str]) -> None:
    response = client.post("/api/auth/logout", headers=alice)
    assert response.status_code == 200
    assert response.json() == {"message": "Logged out successfully"}
