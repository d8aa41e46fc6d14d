"""Tests for authentication API endpoints."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import jwt
import pytest
from fastapi.testclient import TestClient

from artfolio.auth_utils import authsettings


class TestAuthAPI:
    @pytest.mark.parametrize(
        "user_data",
        [
            {"email": "test1@example.com", "password": "password123"},
            {"email": "user.with.dots@example.com", "password": "password123", "displayName": "Dots"},
            {"email": "user+tag@example.com", "password": "verylongpassword12345"},
        ],
    )
    def test_register_success(self, client: TestClient, user_data):
        response = client.post("/api/auth/register", json=user_data)
        assert response.status_code == 201
        data = response.json()
        assert data["email"] == user_data["email"]
        assert "id" in data

    @pytest.mark.parametrize(
        "invalid_data",
        [
            {"email": "invalid-email", "password": "password123"},
            {"email": "test@example.com", "password": "short"},
            {"email": "test@example.com"},
            {"password": "password123"},
            {},
        ],
    )
    def test_register_validation_errors(self, client: TestClient, invalid_data):
        assert client.post("/api/auth/register", json=invalid_data).status_code == 422

    def test_register_duplicate_email(self, client: TestClient, test_user_data):
        assert client.post("/api/auth/register", json=test_user_data).status_code == 201

        response = client.post("/api/auth/register", json={**test_user_data, "email": test_user_data["email"].upper()})
        assert response.status_code == 400
        assert response.json()["detail"] == "Email already registered"

    def test_register_assigns_default_slug(self, client: TestClient):
        response = client.post("/api/auth/register", json={"email": "Jane.Doe@example.com", "password": "password123"})
        assert response.status_code == 201
        assert response.json()["slug"] == "janedoe"

    def test_default_slug_gets_suffix_when_taken(self, client: TestClient):
        slugs = [
            client.post("/api/auth/register", json={"email": email, "password": "password123"}).json()["slug"]
            for email in ("jane@example.com", "jane@other.com", "jane@third.com")
        ]
        assert slugs == ["jane", "jane-1", "jane-2"]

    @pytest.mark.parametrize("email", ["ab@example.com", "api@example.com"])
    def test_unusable_local_part_falls_back(self, client: TestClient, email):
        response = client.post("/api/auth/register", json={"email": email, "password": "password123"})
        assert response.json()["slug"] == "artist"

    def test_superadmin_email_gets_superadmin_role(self, client: TestClient):
        client.post("/api/auth/register", json={"email": "admin@example.com", "password": "password123"})
        tokens = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "password123"}).json()["tokens"]

        me = client.get("/api/me", headers={"Authorization": f"Bearer {tokens['accessToken']}"}).json()
        assert me["role"] == "superadmin"

    def test_login_success(self, client: TestClient, test_user_data):
        client.post("/api/auth/register", json=test_user_data)
        response = client.post("/api/auth/login", json={"email": test_user_data["email"], "password": test_user_data["password"]})

        assert response.status_code == 200
        tokens = response.json()["tokens"]
        assert tokens["tokenType"] == "bearer"
        payload = jwt.decode(tokens["accessToken"], authsettings.jwt_secret_key, algorithms=[authsettings.jwt_algorithm])
        assert payload["type"] == "access"

    def test_login_wrong_password(self, client: TestClient, test_user_data):
        client.post("/api/auth/register", json=test_user_data)
        response = client.post("/api/auth/login", json={"email": test_user_data["email"], "password": "wrongpassword"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_login_unknown_user(self, client: TestClient):
        response = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "password123"})
        assert response.status_code == 401

    def test_refresh_token(self, client: TestClient, test_user_data):
        client.post("/api/auth/register", json=test_user_data)
        tokens = client.post("/api/auth/login", json={"email": test_user_data["email"], "password": test_user_data["password"]}).json()["tokens"]

        response = client.post("/api/auth/refresh", json={"refreshToken": tokens["refreshToken"]})
        assert response.status_code == 200
        assert set(response.json()) == {"accessToken", "refreshToken", "tokenType"}

    def test_refresh_rejects_access_token(self, client: TestClient, test_user_data):
        client.post("/api/auth/register", json=test_user_data)
        tokens = client.post("/api/auth/login", json={"email": test_user_data["email"], "password": test_user_data["password"]}).json()["tokens"]

        response = client.post("/api/auth/refresh", json={"refreshToken": tokens["accessToken"]})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token type"

    def test_access_endpoint_rejects_refresh_token(self, client: TestClient, test_user_data):
        client.post("/api/auth/register", json=test_user_data)
        tokens = client.post("/api/auth/login", json={"email": test_user_data["email"], "password": test_user_data["password"]}).json()["tokens"]

        response = client.get("/api/me", headers={"Authorization": f"Bearer {tokens['refreshToken']}"})
        assert response.status_code == 401

    @pytest.mark.parametrize(
        "token,detail",
        [
            ("not-a-jwt", "Invalid refresh token"),
            (None, "Refresh token expired"),
        ],
    )
    def test_refresh_invalid(self, client: TestClient, token, detail):
        if token is None:
            payload = {"sub": str(uuid4()), "exp": datetime.now(UTC) - timedelta(minutes=1), "type": "refresh"}
            token = jwt.encode(payload, authsettings.jwt_secret_key, algorithm=authsettings.jwt_algorithm)
        response = client.post("/api/auth/refresh", json={"refreshToken": token})
        assert response.status_code == 401
        assert response.json()["detail"] == detail

    def test_refresh_unknown_user(self, client: TestClient):
        payload = {"sub": str(uuid4()), "exp": datetime.now(UTC) + timedelta(minutes=5), "type": "refresh"}
        token = jwt.encode(payload, authsettings.jwt_secret_key, algorithm=authsettings.jwt_algorithm)
        response = client.post("/api/auth/refresh", json={"refreshToken": token})
        assert response.status_code == 401
        assert response.json()["detail"] == "User not found"

    def test_change_password(self, authenticated_client: TestClient, test_user_data):
        response = authenticated_client.post(
            "/api/auth/change-password",
            json={"currentPassword": test_user_data["password"], "newPassword": "NewPassword456", "confirmPassword": "NewPassword456"},
        )
        assert response.status_code == 200

        login = authenticated_client.post("/api/auth/login", json={"email": test_user_data["email"], "password": "NewPassword456"})
        assert login.status_code == 200

    def test_change_password_mismatch(self, authenticated_client: TestClient, test_user_data):
        response = authenticated_client.post(
            "/api/auth/change-password",
            json={"currentPassword": test_user_data["password"], "newPassword": "NewPassword456", "confirmPassword": "Different456"},
        )
        assert response.status_code == 400

    def test_change_password_wrong_current(self, authenticated_client: TestClient):
        response = authenticated_client.post(
            "/api/auth/change-password",
            json={"currentPassword": "WrongPassword1", "newPassword": "NewPassword456", "confirmPassword": "NewPassword456"},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Current password is incorrect"
