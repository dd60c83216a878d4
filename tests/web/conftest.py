"""Shared fixtures for web API tests."""

import os
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from cli.config_models import MindJournalConfig
from web.rate_limit import reset_rate_limits
from web.user_store import init_db


@pytest.fixture
def jwt_secret():
    return "test-jwt-secret"


def _make_auth_token(jwt_secret, user_id, email="u@test.com", name="U"):
    return jwt.encode(
        {"sub": user_id, "email": email, "name": name},
        jwt_secret,
        algorithm="HS256",
    )


@pytest.fixture
def auth_token(jwt_secret):
    return _make_auth_token(jwt_secret, "user-123", "test@example.com", "Test")


@pytest.fixture
def auth_headers(auth_token):
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def auth_token_b(jwt_secret):
    """Second user token for isolation tests."""
    return _make_auth_token(jwt_secret, "user-456", "b@test.com", "UserB")


@pytest.fixture
def auth_headers_b(auth_token_b):
    return {"Authorization": f"Bearer {auth_token_b}"}


@pytest.fixture
def users_db(tmp_path):
    """Fresh users.db for each test."""
    db_path = tmp_path / "users.db"
    init_db(db_path)
    return db_path


@pytest.fixture
def web_config(tmp_path):
    """Config with no batch delay and no burst limit so tests run fast."""
    return MindJournalConfig.from_dict(
        {
            "paths": {"db": str(tmp_path / "journal.db"), "users_db": str(tmp_path / "users.db")},
            "analysis": {"batch_delay": 0},
            "server": {"environment": "test", "ai_burst_interval": 0},
        }
    )


@pytest.fixture
def client(jwt_secret, users_db, web_config, store, analysis_provider):
    """Test client with a temp entry store and a mock-LLM analysis provider."""
    from web.app import app
    from web.deps import get_analysis_provider, get_config, get_entry_store

    patches = [
        patch.dict(os.environ, {"JWT_SECRET": jwt_secret}),
        # user_store uses test DB
        patch("web.user_store._DEFAULT_DB_PATH", users_db),
    ]
    for p in patches:
        p.start()

    app.dependency_overrides[get_config] = lambda: web_config
    app.dependency_overrides[get_entry_store] = lambda: store
    app.dependency_overrides[get_analysis_provider] = lambda: analysis_provider
    reset_rate_limits()

    yield TestClient(app)

    app.dependency_overrides.clear()
    reset_rate_limits()
    for p in reversed(patches):
        p.stop()


@pytest.fixture
def create_entry(client, auth_headers):
    """POST an entry through the API and return the response JSON."""

    def _create(headers=None, **fields):
        body = {"title": "Entry", "content": "Some words about my day", "mood": "neutral"}
        body.update(fields)
        res = client.post("/api/journal", headers=headers or auth_headers, json=body)
        assert res.status_code == 201, res.text
        return res.json()

    return _create
