"""Tests for auth domain router."""

from datetime import date, timedelta

from fastapi.testclient import TestClient
from sqlmodel import Session, select

from app.auth.service import FORGOT_PASSWORD_MESSAGE
from app.auth.tokens import TokenService
from app.user.models import User, UserRole
from tests.factories import TEST_PASSWORD

REGISTER_PAYLOAD = {
    "email": "new@example.com",
    "password": TEST_PASSWORD,
    "first_name": "New",
    "last_name": "Person",
    "birthdate": "1994-02-03",
}


# --- POST /auth/register ---


def test_register_returns_user_and_tokens(unauthenticated_client: TestClient):
    response = unauthenticated_client.post("/auth/register", json=REGISTER_PAYLOAD)

    assert response.status_code == 201
    data = response.json()
    assert data["user"]["email"] == "new@example.com"
    assert data["user"]["role"] == "user"
    assert data["access_token"]
    assert data["refresh_token"]
    assert "password_hash" not in data["user"]
    assert "password" not in data["user"]


def test_register_ignores_role_in_payload(
    unauthenticated_client: TestClient, session: Session
):
    response = unauthenticated_client.post(
        "/auth/register", json={**REGISTER_PAYLOAD, "role": "admin"}
    )

    assert response.status_code == 201
    assert response.json()["user"]["role"] == "user"
    stored = session.exec(select(User).where(User.email == "new@example.com")).one()
    assert stored.role == UserRole.user


def test_register_duplicate_email(unauthenticated_client: TestClient, test_user: User):
    response = unauthenticated_client.post(
        "/auth/register", json={**REGISTER_PAYLOAD, "email": test_user.email}
    )

    assert response.status_code == 409
    assert response.json() == {
        "type": "email_exists",
        "message": "User with this email already exists",
    }


def test_register_rejects_weak_password(unauthenticated_client: TestClient):
    response = unauthenticated_client.post(
        "/auth/register", json={**REGISTER_PAYLOAD, "password": "alllowercase1"}
    )

    assert response.status_code == 422
    body = response.json()
    assert body["type"] == "validation_error"
    assert "password" in body["message"]


def test_register_rejects_future_birthdate(unauthenticated_client: TestClient):
    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    response = unauthenticated_client.post(
        "/auth/register", json={**REGISTER_PAYLOAD, "birthdate": tomorrow}
    )

    assert response.status_code == 422


def test_register_rejects_short_name(unauthenticated_client: TestClient):
    response = unauthenticated_client.post(
        "/auth/register", json={**REGISTER_PAYLOAD, "first_name": "A"}
    )

    assert response.status_code == 422


# --- POST /auth/login ---


def test_login_success(unauthenticated_client: TestClient, test_user: User):
    response = unauthenticated_client.post(
        "/auth/login", json={"email": test_user.email, "password": TEST_PASSWORD}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["id"] == str(test_user.id)
    assert data["access_token"]


def test_login_failures_are_indistinguishable(
    unauthenticated_client: TestClient, test_user: User
):
    unknown = unauthenticated_client.post(
        "/auth/login", json={"email": "nouser@x.com", "password": "anything"}
    )
    wrong = unauthenticated_client.post(
        "/auth/login", json={"email": test_user.email, "password": "wrongpass"}
    )

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.json() == wrong.json() == {
        "type": "invalid_credentials",
        "message": "Invalid credentials",
    }


# --- POST /auth/refresh ---


def test_refresh_with_refresh_token(
    unauthenticated_client: TestClient, tokens: TokenService, test_user: User
):
    pair = tokens.generate_tokens(test_user)

    response = unauthenticated_client.post(
        "/auth/refresh", json={"refresh_token": pair.refresh_token}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["id"] == str(test_user.id)
    assert tokens.verify_token(data["access_token"]).sub == test_user.id


def test_refresh_rejects_access_token(
    unauthenticated_client: TestClient, tokens: TokenService, test_user: User
):
    pair = tokens.generate_tokens(test_user)

    response = unauthenticated_client.post(
        "/auth/refresh", json={"refresh_token": pair.access_token}
    )

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid or expired token"


def test_refresh_for_deleted_user(
    unauthenticated_client: TestClient,
    tokens: TokenService,
    test_user: User,
    session: Session,
):
    pair = tokens.generate_tokens(test_user)
    session.delete(test_user)
    session.commit()

    response = unauthenticated_client.post(
        "/auth/refresh", json={"refresh_token": pair.refresh_token}
    )

    assert response.status_code == 401


# --- forgot / reset password ---


def test_forgot_password_same_response_for_any_email(
    unauthenticated_client: TestClient, test_user: User, sent_resets: list
):
    unknown = unauthenticated_client.post(
        "/auth/forgot-password", json={"email": "nouser@x.com"}
    )
    known = unauthenticated_client.post(
        "/auth/forgot-password", json={"email": test_user.email}
    )

    assert unknown.status_code == known.status_code == 200
    assert unknown.content == known.content
    assert known.json() == {"message": FORGOT_PASSWORD_MESSAGE}
    assert [email for email, _ in sent_resets] == [test_user.email]


def test_reset_password_flow(
    unauthenticated_client: TestClient, test_user: User, sent_resets: list
):
    unauthenticated_client.post(
        "/auth/forgot-password", json={"email": test_user.email}
    )
    _, token = sent_resets[0]

    response = unauthenticated_client.post(
        "/auth/reset-password", json={"token": token, "new_password": "N3w!Secret"}
    )
    assert response.status_code == 200
    assert response.json() == {"message": "Password has been successfully reset"}

    reused = unauthenticated_client.post(
        "/auth/reset-password", json={"token": token, "new_password": "N3w!Secret"}
    )
    assert reused.status_code == 400
    assert reused.json() == {
        "type": "bad_request",
        "message": "Invalid or expired reset token",
    }

    login = unauthenticated_client.post(
        "/auth/login", json={"email": test_user.email, "password": "N3w!Secret"}
    )
    assert login.status_code == 200


def test_reset_password_validates_new_password(unauthenticated_client: TestClient):
    response = unauthenticated_client.post(
        "/auth/reset-password", json={"token": "whatever", "new_password": "short"}
    )

    assert response.status_code == 422


# --- GET /auth/me ---


def test_get_me(client: TestClient, test_user: User):
    response = client.get("/auth/me")

    assert response.status_code == 200
    assert response.json()["email"] == test_user.email


def test_get_me_without_token(unauthenticated_client: TestClient):
    response = unauthenticated_client.get("/auth/me")

    assert response.status_code == 401
    assert response.json()["type"] == "not_authenticated"


def test_get_me_with_garbage_token(unauthenticated_client: TestClient):
    response = unauthenticated_client.get(
        "/auth/me", headers={"Authorization": "Bearer not.a.jwt"}
    )

    assert response.status_code == 401
    assert response.json() == {
        "type": "invalid_token",
        "message": "Invalid or expired token",
    }
