"""Unit tests for auth API endpoints.

Tests /auth/register, /auth/login, /auth/refresh, /auth/public-keys,
/.well-known/jwks.json, /auth/me and /health using FastAPI TestClient
with an injected in-memory AuthService.
"""

from unittest.mock import AsyncMock, patch
from uuid import UUID

import jwt
import pytest
from fastapi.testclient import TestClient

from chatauth.api.errors import ERROR_RESPONSES, error_response
from chatauth.errors import ErrorKind, InternalError
from chatauth.main import create_app

EMAIL = "a@x.com"
PASSWORD = "Secur3P@ss!"
TOKEN_ERROR = "invalid or expired token"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def client(auth_service):
    """TestClient around an app wired with the in-memory AuthService."""
    app = create_app(auth_service)
    with TestClient(app) as tc:
        yield tc


@pytest.fixture
def registered(client):
    response = client.post("/auth/register", json={"email": EMAIL, "password": PASSWORD})
    assert response.status_code == 201
    return response.json()["user_id"]


@pytest.fixture
def tokens(client, registered):
    response = client.post("/auth/login", json={"email": EMAIL, "password": PASSWORD})
    assert response.status_code == 200
    return response.json()


# ---------------------------------------------------------------------------
# POST /auth/register
# ---------------------------------------------------------------------------

class TestRegister:
    """Tests for POST /auth/register."""

    def test_creates_account(self, client):
        response = client.post("/auth/register", json={"email": EMAIL, "password": PASSWORD})

        assert response.status_code == 201
        body = response.json()
        assert UUID(body["user_id"])
        assert "password" not in body
        assert "password_hash" not in body

    def test_duplicate_email_returns_409(self, client, registered):
        response = client.post(
            "/auth/register", json={"email": "A@X.com", "password": "other-password"}
        )

        assert response.status_code == 409
        assert response.json()["error"] == "email already registered"

    @pytest.mark.parametrize(
        "payload",
        [
            {"email": "not-an-email", "password": PASSWORD},
            {"email": EMAIL, "password": "short"},
            {"email": EMAIL, "password": " " * 12},
            {"email": EMAIL},
            {"password": PASSWORD},
        ],
    )
    def test_invalid_payload_returns_400(self, client, payload):
        response = client.post("/auth/register", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation error"
        assert "detail" in body
        assert PASSWORD not in response.text


# ---------------------------------------------------------------------------
# POST /auth/login
# ---------------------------------------------------------------------------

class TestLogin:
    """Tests for POST /auth/login."""

    def test_returns_token_pair(self, tokens, registered):
        assert tokens["token_type"] == "bearer"
        assert tokens["expires_in"] == 900
        assert tokens["user_id"] == registered
        assert tokens["access_token"].count(".") == 2
        assert tokens["refresh_token"].count(".") == 2

    def test_wrong_password_returns_401(self, client, registered):
        response = client.post("/auth/login", json={"email": EMAIL, "password": "wrong-password"})

        assert response.status_code == 401
        assert response.json()["error"] == "invalid email or password"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_unknown_email_matches_wrong_password(self, client, registered):
        unknown = client.post("/auth/login", json={"email": "b@x.com", "password": PASSWORD})
        wrong = client.post("/auth/login", json={"email": EMAIL, "password": "wrong-password"})

        assert unknown.status_code == wrong.status_code == 401
        assert unknown.json()["error"] == wrong.json()["error"]

    def test_short_password_is_not_a_validation_error(self, client, registered):
        response = client.post("/auth/login", json={"email": EMAIL, "password": "x"})
        assert response.status_code == 401


# ---------------------------------------------------------------------------
# POST /auth/refresh
# ---------------------------------------------------------------------------

class TestRefresh:
    """Tests for POST /auth/refresh."""

    def test_rotates_pair(self, client, tokens):
        response = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

        assert response.status_code == 200
        body = response.json()
        assert body["user_id"] == tokens["user_id"]
        assert body["refresh_token"] != tokens["refresh_token"]

    def test_replay_returns_401(self, client, tokens):
        client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

        response = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

        assert response.status_code == 401
        assert response.json()["error"] == TOKEN_ERROR

    def test_token_failures_are_indistinguishable(self, client, tokens):
        client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})

        replayed = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        garbage = client.post("/auth/refresh", json={"refresh_token": "not-a-jwt"})
        wrong_type = client.post("/auth/refresh", json={"refresh_token": tokens["access_token"]})

        for response in (replayed, garbage, wrong_type):
            assert response.status_code == 401
            assert response.json()["error"] == TOKEN_ERROR

    def test_empty_token_returns_400(self, client):
        response = client.post("/auth/refresh", json={"refresh_token": ""})
        assert response.status_code == 400


# ---------------------------------------------------------------------------
# Public keys
# ---------------------------------------------------------------------------

class TestPublicKeys:
    """Tests for GET /auth/public-keys and /.well-known/jwks.json."""

    def test_public_keys(self, client, key_manager):
        response = client.get("/auth/public-keys")

        assert response.status_code == 200
        keys = response.json()["keys"]
        assert len(keys) == 1
        assert keys[0]["kid"] == key_manager.kid
        assert keys[0]["kty"] == "RSA"
        assert keys[0]["alg"] == "RS256"
        assert keys[0]["use"] == "sig"
        assert "d" not in keys[0]

    def test_well_known_matches(self, client):
        assert client.get("/.well-known/jwks.json").json() == client.get("/auth/public-keys").json()

    def test_verifies_issued_token(self, client, tokens):
        jwk = client.get("/.well-known/jwks.json").json()["keys"][0]
        public_key = jwt.PyJWK(jwk).key

        claims = jwt.decode(tokens["access_token"], public_key, algorithms=["RS256"])
        assert claims["sub"] == tokens["user_id"]


# ---------------------------------------------------------------------------
# GET /auth/me
# ---------------------------------------------------------------------------

class TestMe:
    """Tests for GET /auth/me."""

    def test_returns_identity(self, client, tokens):
        response = client.get(
            "/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"}
        )

        assert response.status_code == 200
        assert response.json() == {"user_id": tokens["user_id"], "email": EMAIL}

    def test_refresh_token_rejected(self, client, tokens):
        response = client.get(
            "/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"}
        )

        assert response.status_code == 401
        assert response.json()["error"] == TOKEN_ERROR

    def test_missing_header(self, client):
        response = client.get("/auth/me")
        assert response.status_code in (401, 403)


# ---------------------------------------------------------------------------
# Errors and correlation ids
# ---------------------------------------------------------------------------

class TestErrorHandling:
    """Tests for error mapping and response shape."""

    def test_every_kind_is_mapped(self):
        assert set(ERROR_RESPONSES) == set(ErrorKind)

    @pytest.mark.parametrize(
        "kind,status_code",
        [
            (ErrorKind.EMAIL_ALREADY_EXISTS, 409),
            (ErrorKind.INVALID_CREDENTIALS, 401),
            (ErrorKind.INVALID_TOKEN, 401),
            (ErrorKind.TOKEN_EXPIRED, 401),
            (ErrorKind.TOKEN_REVOKED, 401),
            (ErrorKind.INTERNAL, 500),
        ],
    )
    def test_status_codes(self, kind, status_code):
        assert error_response(kind)[0] == status_code

    def test_internal_error_hides_cause(self, client, auth_service):
        with patch.object(
            auth_service,
            "login",
            AsyncMock(side_effect=InternalError("get user by email: connection refused")),
        ):
            response = client.post("/auth/login", json={"email": EMAIL, "password": PASSWORD})

        assert response.status_code == 500
        assert response.json()["error"] == "internal server error"
        assert "connection refused" not in response.text

    def test_correlation_id_echoed(self, client):
        response = client.post(
            "/auth/login",
            json={"email": EMAIL, "password": PASSWORD},
            headers={"X-Correlation-Id": "corr-123"},
        )

        assert response.status_code == 401
        assert response.headers["X-Correlation-Id"] == "corr-123"
        assert response.json()["correlation_id"] == "corr-123"

    @pytest.mark.parametrize("supplied", ["has spaces {and} braces", "x" * 65])
    def test_unsafe_correlation_id_replaced(self, client, supplied):
        response = client.get("/auth/public-keys", headers={"X-Correlation-Id": supplied})

        returned = response.headers["X-Correlation-Id"]
        assert returned != supplied
        assert UUID(returned).version == 4

    def test_correlation_id_generated(self, client):
        response = client.get("/auth/public-keys")
        assert UUID(response.headers["X-Correlation-Id"]).version == 4


# ---------------------------------------------------------------------------
# GET /health
# ---------------------------------------------------------------------------

class TestHealth:
    def test_healthy(self, client):
        with patch("chatauth.api.routes.db_health_check", AsyncMock(return_value=True)):
            response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "healthy"

    def test_degraded(self, client):
        with patch("chatauth.api.routes.db_health_check", AsyncMock(return_value=False)):
            response = client.get("/health")

        assert response.json()["status"] == "degraded"
