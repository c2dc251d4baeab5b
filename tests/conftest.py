import time

import jwt
import pytest

from resumeboost.db.base import create_schema
from resumeboost.services.auth_service import AuthService

TEST_JWT_SECRET = "endpoint-test-jwt-secret-0123456789"


@pytest.fixture
def database_url(tmp_path):
    url = f"sqlite:///{tmp_path / 'test.db'}"
    create_schema(url)
    return url


@pytest.fixture
def make_token():
    def _make_token(user_id="user-1", secret=TEST_JWT_SECRET, audience="authenticated", expires_in=3600):
        claims = {"sub": user_id, "aud": audience, "exp": int(time.time()) + expires_in}
        return jwt.encode(claims, secret, algorithm="HS256")

    return _make_token


@pytest.fixture
def auth_header(make_token):
    def _auth_header(user_id="user-1"):
        return {"Authorization": f"Bearer {make_token(user_id)}"}

    return _auth_header


@pytest.fixture
def server(monkeypatch):
    """The Flask server module with token verification bound to the test secret."""
    from resumeboost.api import server as server_module

    monkeypatch.setattr(server_module, "auth_service", AuthService(secret=TEST_JWT_SECRET))
    return server_module
