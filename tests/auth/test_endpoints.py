"""Tests for authentication endpoints.

Tests register, login and current-user endpoints end to end through the
Flask test client.
"""

import json

import jwt as pyjwt

from fullstack_auth.auth.token import TokenIssuer
from fullstack_auth.utils import isodatetime

TEST_PASSWORD = "Passw0rd!"
TEST_SECRET = "test-secret-key"


def _assert_no_secrets(response):
    body = response.get_data(as_text=True)
    assert "password" not in body
    assert TEST_PASSWORD not in body
    assert "$2b$" not in body


def _assert_no_secrets_in_received(response):
    received = response.get_json()["error"]["details"]["received"]
    assert received["password"] == "***"


# ============================================================================
# Register
# ============================================================================


class TestRegister:
    """Tests for POST /api/auth/register."""

    def test_register_success(self, client):
        """Register should create the account and return a token."""
        response = client.post(
            "/api/auth/register",
            json={"email": "a@x.com", "name": "A", "password": "Passw0rd!"}
        )
        assert response.status_code == 201

        data = json.loads(response.data)
        assert data["message"] == "User created successfully"
        assert data["user"]["email"] == "a@x.com"
        assert data["user"]["name"] == "A"
        assert data["user"]["id"]
        assert data["token"]
        _assert_no_secrets(response)

    def test_register_duplicate_email_returns_409(self, client, registered_user):
        """Registering the same email twice should return 409."""
        response = client.post(
            "/api/auth/register",
            json={"email": "a@x.com", "name": "Again", "password": "Different1!"}
        )
        assert response.status_code == 409

        data = response.get_json()
        assert data["error"]["type"] == "ConflictError"
        assert data["error"]["message"] == "User with this email already exists"

    def test_register_echoes_email_as_submitted(self, client, registered_user):
        """A domain differing only in case is a new account, stored as sent."""
        response = client.post(
            "/api/auth/register",
            json={"email": "a@X.Com", "name": "A", "password": "Passw0rd!"}
        )
        assert response.status_code == 201
        assert response.get_json()["user"]["email"] == "a@X.Com"

    def test_register_weak_password(self, client):
        """Passwords failing the policy should return 400 with field errors."""
        response = client.post(
            "/api/auth/register",
            json={"email": "a@x.com", "name": "A", "password": "weak"}
        )
        assert response.status_code == 400

        errors = response.get_json()["error"]["details"]["errors"]
        assert [e["field"] for e in errors] == ["password"]
        _assert_no_secrets_in_received(response)

    def test_register_invalid_email(self, client):
        """A malformed email should return 400."""
        response = client.post(
            "/api/auth/register",
            json={"email": "not-an-email", "name": "A", "password": "Passw0rd!"}
        )
        assert response.status_code == 400

        errors = response.get_json()["error"]["details"]["errors"]
        assert any(e["field"] == "email" for e in errors)

    def test_register_missing_fields(self, client):
        """Missing fields should each be reported."""
        response = client.post("/api/auth/register", json={})
        assert response.status_code == 400

        fields = {e["field"] for e in response.get_json()["error"]["details"]["errors"]}
        assert fields == {"email", "name", "password"}

    def test_register_rejects_unknown_fields(self, client):
        """Extra body fields should be rejected, not ignored."""
        response = client.post(
            "/api/auth/register",
            json={"email": "a@x.com", "name": "A", "password": "Passw0rd!", "is_admin": True}
        )
        assert response.status_code == 400

        errors = response.get_json()["error"]["details"]["errors"]
        assert errors[0]["field"] == "is_admin"
        assert errors[0]["expected_type"] == "extra_forbidden"

    def test_register_non_json_body(self, client):
        """Form-encoded bodies should be rejected."""
        response = client.post(
            "/api/auth/register",
            data={"email": "a@x.com", "name": "A", "password": "Passw0rd!"}
        )
        assert response.status_code == 400


# ============================================================================
# Login
# ============================================================================


class TestLogin:
    """Tests for POST /api/auth/login."""

    def test_login_success(self, client, registered_user):
        """Valid credentials should return the account and a token."""
        response = client.post(
            "/api/auth/login",
            json={"email": "a@x.com", "password": TEST_PASSWORD}
        )
        assert response.status_code == 200

        data = response.get_json()
        assert data["message"] == "Sign in successful"
        assert data["user"] == registered_user["user"]
        assert data["token"]
        _assert_no_secrets(response)

    def test_login_wrong_password(self, client, registered_user):
        """Wrong password should return 401 Invalid credentials."""
        response = client.post(
            "/api/auth/login",
            json={"email": "a@x.com", "password": "wrong"}
        )
        assert response.status_code == 401

        data = response.get_json()
        assert data["error"]["type"] == "AuthenticationError"
        assert data["error"]["message"] == "Invalid credentials"

    def test_login_unknown_email_matches_wrong_password(self, client, registered_user):
        """Unknown email and wrong password should be indistinguishable."""
        wrong_password = client.post(
            "/api/auth/login",
            json={"email": "a@x.com", "password": "wrong"}
        )
        unknown_email = client.post(
            "/api/auth/login",
            json={"email": "nouser@x.com", "password": "anything"}
        )

        assert unknown_email.status_code == wrong_password.status_code == 401
        assert unknown_email.get_json() == wrong_password.get_json()

    def test_login_does_not_apply_signup_policy(self, client, registered_user):
        """A short wrong password should reach verification and return 401."""
        response = client.post(
            "/api/auth/login",
            json={"email": "a@x.com", "password": "x"}
        )
        assert response.status_code == 401

    def test_login_empty_password_is_validation_error(self, client):
        """An empty password is malformed input."""
        response = client.post(
            "/api/auth/login",
            json={"email": "a@x.com", "password": ""}
        )
        assert response.status_code == 400

    def test_login_rejects_unknown_fields(self, client):
        """Extra body fields should be rejected."""
        response = client.post(
            "/api/auth/login",
            json={"email": "a@x.com", "password": TEST_PASSWORD, "remember": True}
        )
        assert response.status_code == 400


# ============================================================================
# Current user
# ============================================================================


class TestMe:
    """Tests for GET /api/auth/me."""

    def test_me_with_register_token(self, client, registered_user, auth_headers):
        """Token from register should resolve to the same account."""
        response = client.get("/api/auth/me", headers=auth_headers)
        assert response.status_code == 200

        data = response.get_json()
        assert data == {"user": registered_user["user"]}
        _assert_no_secrets(response)

    def test_me_with_login_token(self, client, registered_user):
        """Token from login should resolve to the same account."""
        login = client.post(
            "/api/auth/login",
            json={"email": "a@x.com", "password": TEST_PASSWORD}
        ).get_json()

        response = client.get(
            "/api/auth/me",
            headers={"Authorization": f"Bearer {login['token']}"}
        )
        assert response.status_code == 200
        assert response.get_json()["user"]["id"] == registered_user["user"]["id"]

    def test_me_without_header(self, client):
        """No Authorization header should return 401."""
        response = client.get("/api/auth/me")
        assert response.status_code == 401

        data = response.get_json()
        assert data["error"]["message"] == "Missing authorization header"

    def test_me_with_malformed_header(self, client, registered_user):
        """Non-bearer schemes should return 401."""
        response = client.get(
            "/api/auth/me",
            headers={"Authorization": f"Token {registered_user['token']}"}
        )
        assert response.status_code == 401
        assert response.get_json()["error"]["message"] == "Invalid authorization header format"

    def test_me_with_foreign_secret_token(self, client, registered_user):
        """A token signed with a different secret should return 401."""
        foreign = TokenIssuer("some-other-secret").issue(
            registered_user["user"]["id"], "a@x.com"
        )
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {foreign}"})
        assert response.status_code == 401
        assert response.get_json()["error"]["message"] == "Invalid token"

    def test_me_with_expired_token(self, client, registered_user):
        """An expired token should return 401 regardless of payload."""
        past_ts = isodatetime.now_unix() - 60
        expired = pyjwt.encode(
            {
                "sub": registered_user["user"]["id"],
                "email": "a@x.com",
                "iat": past_ts - 3600,
                "exp": past_ts,
            },
            TEST_SECRET,
            algorithm="HS256",
        )
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {expired}"})
        assert response.status_code == 401
        assert response.get_json()["error"]["message"] == "Token has expired"

    def test_me_for_unknown_account(self, client):
        """A valid token for an account that does not exist should return 401."""
        token = TokenIssuer(TEST_SECRET).issue("550e8400-e29b-41d4-a716-446655440000", "ghost@x.com")
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.get_json()["error"]["message"] == "User not found"


class TestConcreteScenarios:
    """End-to-end flows with fixed inputs."""

    def test_register_then_duplicate(self, client):
        """register a@x.com -> 2xx, again -> 409."""
        body = {"email": "a@x.com", "name": "A", "password": "Passw0rd!"}

        first = client.post("/api/auth/register", json=body)
        assert 200 <= first.status_code < 300
        assert first.get_json()["user"]["email"] == "a@x.com"
        assert first.get_json()["token"]

        second = client.post("/api/auth/register", json=body)
        assert second.status_code == 409

    def test_login_failures_share_message(self, client, registered_user):
        """Wrong password and unknown email both say Invalid credentials."""
        wrong = client.post("/api/auth/login", json={"email": "a@x.com", "password": "wrong"})
        nouser = client.post("/api/auth/login", json={"email": "nouser@x.com", "password": "anything"})

        assert wrong.status_code == 401
        assert nouser.status_code == 401
        assert wrong.get_json()["error"]["message"] == "Invalid credentials"
        assert nouser.get_json()["error"]["message"] == "Invalid credentials"
