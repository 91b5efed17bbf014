"""Tests for the Streamlit API client."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import requests

from components.api_client import APIClient


class FakeSessionState(dict):
    """dict with attribute access, like st.session_state."""

    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError as e:
            raise AttributeError(name) from e

    def __setattr__(self, name, value):
        self[name] = value


def make_response(status_code, body):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    response.json.return_value = body
    return response


@pytest.fixture
def session():
    state = FakeSessionState()
    with patch("components.api_client.st", SimpleNamespace(session_state=state)):
        yield state


@pytest.fixture
def client(session):
    return APIClient(base_url="http://api.test")


@pytest.mark.unit
class TestRequest:
    """Envelope unwrapping and error mapping."""

    def test_success_returns_data(self, client):
        body = {"statusCode": 200, "data": {"id": "1"}, "message": "ok", "success": True}
        with patch("components.api_client.requests.request", return_value=make_response(200, body)) as request:
            success, data = client.get_video("1")

        assert success is True
        assert data == {"id": "1"}
        assert request.call_args.args == ("GET", "http://api.test/api/v1/videos/1")

    def test_error_returns_message(self, client):
        body = {"statusCode": 404, "data": None, "message": "Video not found", "success": False, "errors": []}
        with patch("components.api_client.requests.request", return_value=make_response(404, body)):
            success, message = client.get_video("1")

        assert success is False
        assert message == "Video not found"

    def test_missing_message_uses_default(self, client):
        response = make_response(502, None)
        response.json.side_effect = ValueError("not json")
        with patch("components.api_client.requests.request", return_value=response):
            success, message = client.delete_video("1")

        assert success is False
        assert message == "Failed to delete video"

    def test_connection_error(self, client):
        with patch("components.api_client.requests.request", side_effect=requests.exceptions.ConnectionError()):
            success, message = client.list_tweets()

        assert success is False
        assert "Cannot connect" in message

    def test_health_path_not_prefixed(self, client):
        body = {"statusCode": 200, "data": {"status": "healthy"}, "message": "ok", "success": True}
        with patch("components.api_client.requests.request", return_value=make_response(200, body)) as request:
            assert client.health_check() is True

        assert request.call_args.args[1] == "http://api.test/health"


@pytest.mark.unit
@pytest.mark.auth
class TestTokens:
    """Bearer header, 401 handling and refresh."""

    def test_bearer_header_from_session(self, client, session):
        session.token = "abc"
        assert client._get_headers() == {"Authorization": "Bearer abc"}

    def test_no_header_without_token(self, client):
        assert client._get_headers() == {}

    def test_401_drops_access_token_only(self, client, session):
        session.token = "expired"
        session.refresh_token = "still-good"
        body = {"statusCode": 401, "data": None, "message": "Unauthorized request", "success": False}

        with patch("components.api_client.requests.request", return_value=make_response(401, body)):
            success, message = client.get_current_user()

        assert success is False
        assert message == "Unauthorized request"
        assert "token" not in session
        assert session.refresh_token == "still-good"

    def test_refresh_stores_new_pair(self, client, session):
        session.refresh_token = "old-refresh"
        body = {
            "statusCode": 200,
            "data": {"accessToken": "new-access", "refreshToken": "new-refresh"},
            "message": "Access token refreshed",
            "success": True
        }

        with patch("components.api_client.requests.request", return_value=make_response(200, body)) as request:
            success, _ = client.refresh()

        assert success is True
        assert session.token == "new-access"
        assert session.refresh_token == "new-refresh"
        assert request.call_args.kwargs["json"] == {"refreshToken": "old-refresh"}

    def test_refresh_without_token(self, client):
        with patch("components.api_client.requests.request") as request:
            success, message = client.refresh()

        assert success is False
        assert message == "No refresh token"
        request.assert_not_called()

    @pytest.mark.parametrize("identifier,field", [
        ("alice@example.com", "email"),
        ("alice", "username"),
    ])
    def test_login_field_from_identifier(self, client, identifier, field):
        body = {"statusCode": 200, "data": {}, "message": "ok", "success": True}
        with patch("components.api_client.requests.request", return_value=make_response(200, body)) as request:
            client.login(identifier, "Password123")

        assert request.call_args.kwargs["json"] == {field: identifier, "password": "Password123"}
