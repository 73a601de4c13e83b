"""Tests for authorizer module."""

from unittest.mock import Mock

import pytest

from gatekeeper.authorizer import Unauthorized, authorize, generate_policy
from gatekeeper.errors import InvalidSignatureError, TokenExpiredError
from gatekeeper.models import AuthorizerRequest
from gatekeeper.oidc import TokenClaims

METHOD_ARN = "arn:aws:execute-api:eu-west-1:123456789012:abcdef/prod/GET/items"


@pytest.fixture
def request_event():
    return AuthorizerRequest(
        type="TOKEN", authorizationToken="Bearer token", methodArn=METHOD_ARN
    )


@pytest.fixture
def validator():
    return Mock()


class TestGeneratePolicy:
    def test_allow(self):
        policy = generate_policy("Allow", METHOD_ARN)

        assert policy.model_dump(by_alias=True) == {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Action": ["execute-api:Invoke"],
                    "Effect": "Allow",
                    "Resource": [METHOD_ARN],
                }
            ],
        }

    def test_deny(self):
        policy = generate_policy("Deny", METHOD_ARN)

        assert policy.statement[0].effect == "Deny"


class TestAuthorize:
    def test_allow(self, request_event, validator):
        """Test claims are turned into an Allow policy with context."""
        validator.validate.return_value = TokenClaims(
            {
                "sub": "user-123",
                "cognito:username": "jdoe",
                "email": "jdoe@example.com",
            }
        )

        response = authorize(request_event, validator)

        validator.validate.assert_called_once_with("Bearer token")
        assert response.principal_id == "user-123"
        assert response.policy_document.statement[0].effect == "Allow"
        assert response.policy_document.statement[0].resource == [METHOD_ARN]
        assert response.context == {
            "sub": "user-123",
            "username": "jdoe",
            "email": "jdoe@example.com",
        }

    def test_context_only_present_attributes(self, request_event, validator):
        validator.validate.return_value = TokenClaims({"sub": "user-123"})

        response = authorize(request_event, validator)

        assert response.context == {"sub": "user-123"}

    @pytest.mark.parametrize(
        "error",
        [
            InvalidSignatureError("signature mismatch for kid k1"),
            TokenExpiredError("Token has expired"),
        ],
    )
    def test_deny_hides_detail(self, error, request_event, validator, caplog):
        """Test every failure is the same Unauthorized, with the kind logged."""
        validator.validate.side_effect = error

        with pytest.raises(Unauthorized) as excinfo:
            authorize(request_event, validator)

        assert str(excinfo.value) == "Unauthorized"
        assert error.kind in caplog.text

    def test_deny_missing_subject(self, request_event, validator):
        validator.validate.return_value = TokenClaims({"email": "jdoe@example.com"})

        with pytest.raises(Unauthorized):
            authorize(request_event, validator)
