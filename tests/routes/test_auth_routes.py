"""
Tests for auth endpoints.

Supabase Auth is never contacted: the auth service functions are mocked.
"""

import logging

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, patch
from sparklink.main import app
from sparklink.auth.dependencies import get_authenticated_user, AuthenticatedUser
from sparklink.services.errors import ConflictError, ForbiddenError, InvalidCredentialsError

client = TestClient(app)


async def mock_get_authenticated_user_dependency():
    return AuthenticatedUser(
        user_id="test-user-id",
        access_token="test-access-token",
        email="ama@example.com",
    )


@pytest.fixture
def mock_auth():
    app.dependency_overrides[get_authenticated_user] = mock_get_authenticated_user_dependency
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def mock_auth_clients():
    with patch("sparklink.routes.auth.get_anon_client") as anon, \
            patch("sparklink.routes.auth.get_service_role_client") as service:
        anon.return_value = MagicMock()
        service.return_value = MagicMock()
        yield anon, service


@pytest.fixture
def user_row():
    return {
        "id": "test-user-id",
        "email": "ama@example.com",
        "username": "ama_mensah",
        "first_name": "Ama",
        "last_name": "Mensah",
        "subscription": "STARTER",
        "has_verified_badge": False,
        "verification_status": "NONE",
    }


REGISTER_BODY = {
    "email": "ama@example.com",
    "password": "super-secret",
    "first_name": "Ama",
    "last_name": "Mensah",
    "username": "ama_mensah",
}


class TestRegister:

    @patch("sparklink.routes.auth.register_user")
    def test_register(self, mock_register, mock_auth_clients, user_row):
        mock_register.return_value = {"user": user_row, "session": None}

        response = client.post("/auth/register", json=REGISTER_BODY)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "REGISTERED"
        assert data["user"]["username"] == "ama_mensah"
        assert data["session"] is None
        assert mock_register.call_args.kwargs["username"] == "ama_mensah"

    def test_register_short_password(self, mock_auth_clients):
        response = client.post("/auth/register", json={**REGISTER_BODY, "password": "short"})

        assert response.status_code == 422

    def test_rejected_password_is_not_logged(self, mock_auth_clients, caplog):
        with caplog.at_level(logging.ERROR, logger="sparklink.main"):
            response = client.post("/auth/register", json={**REGISTER_BODY, "password": "Secr3t!"})

        assert response.status_code == 422
        assert "Validation error on POST /auth/register" in caplog.text
        assert "password" in caplog.text
        assert "Secr3t!" not in caplog.text
        assert "Secr3t!" not in response.text

    def test_register_invalid_email(self, mock_auth_clients):
        response = client.post("/auth/register", json={**REGISTER_BODY, "email": "not-an-email"})

        assert response.status_code == 422

    @patch("sparklink.routes.auth.register_user")
    def test_register_taken_username(self, mock_register, mock_auth_clients):
        mock_register.side_effect = ConflictError("Username is already taken")

        response = client.post("/auth/register", json=REGISTER_BODY)

        assert response.status_code == 409
        assert response.json()["detail"]["details"] == "Username is already taken"


class TestLogin:

    @patch("sparklink.routes.auth.login_user")
    def test_login(self, mock_login, mock_auth_clients, user_row):
        mock_login.return_value = {
            "user": user_row,
            "session": {"access_token": "jwt", "refresh_token": "refresh", "expires_in": 3600},
        }

        response = client.post("/auth/login", json={"email": "ama@example.com", "password": "super-secret"})

        assert response.status_code == 200
        assert response.json()["session"]["token_type"] == "bearer"
        assert response.json()["user"]["id"] == "test-user-id"

    @patch("sparklink.routes.auth.login_user")
    def test_login_bad_credentials(self, mock_login, mock_auth_clients):
        mock_login.side_effect = InvalidCredentialsError("Invalid email or password")

        response = client.post("/auth/login", json={"email": "ama@example.com", "password": "wrong"})

        assert response.status_code == 401

    @patch("sparklink.routes.auth.login_user")
    def test_login_unverified_email(self, mock_login, mock_auth_clients):
        mock_login.side_effect = ForbiddenError("Please verify your email before logging in")

        response = client.post("/auth/login", json={"email": "ama@example.com", "password": "super-secret"})

        assert response.status_code == 403


class TestVerifyEmail:

    def test_code_must_be_six_digits(self, mock_auth_clients):
        response = client.post("/auth/verify-email", json={"email": "ama@example.com", "code": "12ab"})

        assert response.status_code == 422

    @patch("sparklink.routes.auth.verify_email")
    def test_verify(self, mock_verify, mock_auth_clients):
        mock_verify.return_value = {"session": None}

        response = client.post("/auth/verify-email", json={"email": "ama@example.com", "code": "123456"})

        assert response.status_code == 200
        assert response.json()["verified"] is True


class TestGoogleOAuth:

    @patch("sparklink.routes.auth.get_google_oauth_url")
    def test_google_url(self, mock_url, mock_auth_clients):
        mock_url.return_value = "https://accounts.google.com/o/oauth2/auth?client_id=x"

        response = client.get("/auth/google")

        assert response.status_code == 200
        assert response.json()["url"].startswith("https://accounts.google.com")

    @patch("sparklink.routes.auth.complete_oauth_sign_in")
    def test_oauth_complete(self, mock_complete, mock_auth, mock_auth_clients, user_row):
        mock_complete.return_value = {"user": user_row, "created": True}

        response = client.post("/auth/oauth/complete")

        assert response.status_code == 200
        assert response.json()["created"] is True
        assert mock_complete.call_args.kwargs["user_id"] == "test-user-id"


class TestAuthMe:

    @patch("sparklink.routes.auth.get_supabase_client")
    @patch("sparklink.routes.auth.get_user")
    def test_me_with_users_row(self, mock_get_user, mock_client, mock_auth, user_row):
        mock_get_user.return_value = user_row

        response = client.get("/auth/me")

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == "test-user-id"
        assert data["email"] == "ama@example.com"
        assert data["user"]["subscription"] == "STARTER"

    @patch("sparklink.routes.auth.get_supabase_client")
    @patch("sparklink.routes.auth.get_user")
    def test_me_without_users_row(self, mock_get_user, mock_client, mock_auth):
        mock_get_user.return_value = None

        response = client.get("/auth/me")

        assert response.status_code == 200
        assert response.json()["user"] is None

    def test_me_requires_token(self):
        response = client.get("/auth/me")

        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "unauthorized"
