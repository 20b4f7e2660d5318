"""Shared test fixtures for fullstack-auth."""

import pytest

from fullstack_auth.auth.audit import AuditSink
from fullstack_auth.auth.password import PasswordHasher
from fullstack_auth.auth.service import AuthService
from fullstack_auth.auth.token import TokenIssuer
from fullstack_auth.config import Settings
from fullstack_auth.db import Database
from fullstack_auth.main import create_app

TEST_SECRET = "test-secret-key"
TEST_PASSWORD = "Passw0rd!"


class RecordingAuditSink(AuditSink):
    """Audit sink that keeps records in memory for assertions."""

    def __init__(self):
        self.records = []

    def record(self, action, outcome, **fields):
        self.records.append({"action": action, "outcome": outcome, **fields})

    def outcomes(self, action):
        return [r["outcome"] for r in self.records if r["action"] == action]


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a temp database file.

    Uses bcrypt work factor 4 for fast hashing and ignores any local .env.
    """
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        jwt_secret_key=TEST_SECRET,
        bcrypt_work_factor=4,
    )


@pytest.fixture
def database(settings):
    """Initialized database with schema applied."""
    db = Database(settings.database_path)
    db.init_schema()
    return db


@pytest.fixture
def hasher():
    return PasswordHasher(work_factor=4)


@pytest.fixture
def tokens():
    return TokenIssuer(TEST_SECRET, expiry_days=7)


@pytest.fixture
def audit_sink():
    return RecordingAuditSink()


@pytest.fixture
def auth_service(database, hasher, tokens, audit_sink):
    """AuthService wired to the test database and a recording audit sink."""
    return AuthService(database, hasher, tokens, audit_sink)


@pytest.fixture
def app(settings):
    """Flask app built from test settings."""
    test_app = create_app(settings)
    test_app.config["TESTING"] = True
    return test_app


@pytest.fixture
def client(app):
    """Create test client for API testing."""
    with app.test_client() as client:
        yield client


@pytest.fixture
def registered_user(client):
    """Register a@x.com through the API.

    Returns the parsed register response body.
    """
    response = client.post(
        "/api/auth/register",
        json={"email": "a@x.com", "name": "A", "password": TEST_PASSWORD},
    )
    assert response.status_code == 201
    return response.get_json()


@pytest.fixture
def auth_headers(registered_user):
    """Authorization header carrying the registered user's token."""
    return {"Authorization": f"Bearer {registered_user['token']}"}
