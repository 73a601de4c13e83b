"""Pytest configuration and shared fixtures."""

import json
import time
from unittest.mock import Mock

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from gatekeeper.config import build_validator_config

REGION = "eu-west-1"
USER_POOL_ID = "eu-west-1_TestPool"
CLIENT_ID = "test-client-id"
ISSUER = f"https://cognito-idp.{REGION}.amazonaws.com/{USER_POOL_ID}"
JWKS_URL = f"{ISSUER}/.well-known/jwks.json"


@pytest.fixture(scope="session")
def private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def jwk(private_key):
    """Published JWK for `private_key` under key id "k1"."""
    key = json.loads(jwt.algorithms.RSAAlgorithm.to_jwk(private_key.public_key()))
    key.update(kid="k1", alg="RS256", use="sig")
    return key


@pytest.fixture
def jwks(jwk):
    return {"keys": [jwk]}


@pytest.fixture
def jwks_response(jwks):
    """Mock response of the provider key endpoint."""
    response = Mock()
    response.json.return_value = jwks
    return response


@pytest.fixture
def claims():
    """Claims of a valid Cognito access token."""
    return {
        "sub": "user-123",
        "iss": ISSUER,
        "client_id": CLIENT_ID,
        "token_use": "access",
        "username": "jdoe",
        "exp": int(time.time()) + 3600,
    }


@pytest.fixture
def make_token(private_key):
    """Sign claims into a compact token, with "kid" k1 unless overridden."""

    def _make_token(claims, key=private_key, algorithm="RS256", headers=None):
        if headers is None:
            headers = {"kid": "k1"}
        return jwt.encode(claims, key, algorithm=algorithm, headers=headers)

    return _make_token


@pytest.fixture
def validator_config():
    return build_validator_config(REGION, USER_POOL_ID, CLIENT_ID)
