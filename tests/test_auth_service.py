import time

import jwt
import pytest

from resumeboost.services.auth_service import AuthService
from resumeboost.services.errors import AuthenticationError

SECRET = "unit-test-jwt-secret-0123456789abcdef"


def encode(claims, secret=SECRET):
    return jwt.encode(claims, secret, algorithm="HS256")


def valid_claims(**overrides):
    claims = {"sub": "user-1", "aud": "authenticated", "exp": int(time.time()) + 60}
    claims.update(overrides)
    return claims


def test_authenticate_returns_subject():
    service = AuthService(secret=SECRET)
    assert service.authenticate(f"Bearer {encode(valid_claims())}") == "user-1"


def test_scheme_is_case_insensitive():
    service = AuthService(secret=SECRET)
    assert service.authenticate(f"bearer {encode(valid_claims())}") == "user-1"


@pytest.mark.parametrize("header", [None, "", "Token abc", "Bearer "])
def test_malformed_headers_are_rejected(header):
    with pytest.raises(AuthenticationError):
        AuthService(secret=SECRET).authenticate(header)


@pytest.mark.parametrize(
    "claims",
    [
        valid_claims(exp=int(time.time()) - 10),
        valid_claims(aud="anon"),
        {"aud": "authenticated", "exp": int(time.time()) + 60},
        {"sub": "user-1", "aud": "authenticated"},
    ],
)
def test_invalid_claims_are_rejected(claims):
    with pytest.raises(AuthenticationError):
        AuthService(secret=SECRET).authenticate(f"Bearer {encode(claims)}")


def test_wrong_signature_is_rejected():
    token = encode(valid_claims(), secret="another-jwt-secret-0123456789abcdef")
    with pytest.raises(AuthenticationError):
        AuthService(secret=SECRET).authenticate(f"Bearer {token}")


def test_unconfigured_secret_rejects_everything():
    with pytest.raises(AuthenticationError):
        AuthService(secret=None).authenticate(f"Bearer {encode(valid_claims())}")
