"""
Tests for the response envelope, the auth guard and health endpoints.
"""

import uuid
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from clipnest.models.user import User
from clipnest.utils.security import create_access_token, create_refresh_token

CURRENT_USER = "/api/v1/users/current-user"


@pytest.mark.unit
@pytest.mark.auth
class TestAuthGuard:

    def test_missing_token(self, client: TestClient):
        response = client.get(CURRENT_USER)

        assert response.status_code == 401
        assert response.json() == {
            "statusCode": 401,
            "data": None,
            "message": "Unauthorized request",
            "success": False,
            "errors": [],
        }

    def test_garbage_token(self, client: TestClient):
        response = client.get(CURRENT_USER, headers={"Authorization": "Bearer not.a.jwt"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid access token"

    def test_expired_token(self, client: TestClient, test_user: User):
        token = create_access_token({"sub": str(test_user.id)}, expires_delta=timedelta(minutes=-1))

        response = client.get(CURRENT_USER, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_refresh_token_is_not_an_access_token(self, client: TestClient, test_user: User):
        token = create_refresh_token({"sub": str(test_user.id)})

        response = client.get(CURRENT_USER, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_unknown_subject(self, client: TestClient):
        token = create_access_token({"sub": str(uuid.uuid4())})

        response = client.get(CURRENT_USER, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid access token"

    def test_cookie_takes_precedence_over_header(self, client: TestClient, test_user: User, auth_headers2):
        client.cookies.set("accessToken", create_access_token({"sub": str(test_user.id)}))

        response = client.get(CURRENT_USER, headers=auth_headers2)

        assert response.json()["data"]["username"] == "alice"

    def test_user_never_exposes_secrets(self, client: TestClient, test_db: Session, test_user: User,
                                        auth_headers):
        test_user.refresh_token = "stored-refresh-token"
        test_db.commit()

        body = client.get(CURRENT_USER, headers=auth_headers).text

        assert "stored-refresh-token" not in body
        assert "hashed" not in body.lower()


@pytest.mark.unit
class TestEnvelope:

    def test_success_shape(self, client: TestClient, auth_headers):
        body = client.get(CURRENT_USER, headers=auth_headers).json()

        assert set(body) == {"statusCode", "data", "message", "success"}
        assert body["statusCode"] == 200
        assert body["success"] is True

    def test_unknown_route(self, client: TestClient):
        response = client.get("/api/v1/nothing-here")

        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_validation_error_is_400(self, client: TestClient):
        response = client.get("/api/v1/videos", params={"page": 0})

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert body["errors"][0]["field"] == "query.page"

    def test_malformed_json_is_400(self, client: TestClient, auth_headers):
        response = client.post(
            "/api/v1/tweets",
            content=b"{not json",
            headers={**auth_headers, "Content-Type": "application/json"}
        )

        assert response.status_code == 400

    def test_oversized_body_rejected(self, client: TestClient, auth_headers):
        from clipnest.config import settings

        response = client.post(
            "/api/v1/tweets",
            json={"content": "x"},
            headers={**auth_headers, "Content-Length": str(settings.MAX_UPLOAD_BYTES + 1)}
        )

        assert response.status_code == 413
        assert response.json()["success"] is False

    def test_security_headers(self, client: TestClient):
        response = client.get("/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_account_responses_not_cached(self, client: TestClient, auth_headers):
        response = client.get("/api/v1/users/current-user", headers=auth_headers)

        assert "no-store" in response.headers["Cache-Control"]
        assert "no-store" not in client.get("/health").headers.get("Cache-Control", "")


@pytest.mark.unit
class TestHealth:

    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "healthy"

    def test_ready(self, client: TestClient):
        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["data"]["checks"]["database"] is True

    def test_detailed(self, client: TestClient):
        client.get("/health")

        response = client.get("/health/detailed")

        data = response.json()["data"]
        assert data["components"]["database"]["status"] == "healthy"
        assert data["components"]["database"]["type"] == "sqlite"
        assert data["metrics"]["requests"]["total"] >= 1
        assert "memory_percent" in data["system"]

    def test_root(self, client: TestClient):
        response = client.get("/")

        assert response.json()["data"]["name"] == "Clipnest API"
