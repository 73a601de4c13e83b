"""Conversion of token validation results into authorizer policies."""

import logging
from typing import Literal

from .errors import GatekeeperError, TokenValidationError
from .models import (
    AuthorizerRequest,
    AuthorizerResponse,
    PolicyDocument,
    PolicyStatement,
)
from .oidc import TokenValidator

logger = logging.getLogger(__name__)


class Unauthorized(GatekeeperError):
    """Raised when a request is denied. Carries no validation detail."""

    def __init__(self) -> None:
        super().__init__("Unauthorized")


def generate_policy(effect: Literal["Allow", "Deny"], resource: str) -> PolicyDocument:
    """Build an IAM policy allowing or denying invocation of `resource`."""
    return PolicyDocument(
        statement=[PolicyStatement(effect=effect, resource=[resource])],
    )


def authorize(
    request: AuthorizerRequest, validator: TokenValidator
) -> AuthorizerResponse:
    """Validate the request token and allow its principal on the method ARN.

    Raises:
        Unauthorized: If the token fails validation for any reason
    """
    try:
        claims = validator.validate(request.authorization_token)
    except TokenValidationError as e:
        logger.warning(f"Token validation failed ({e.kind}): {e}")
        raise Unauthorized() from e

    principal_id = claims.subject
    if not principal_id:
        logger.warning("Token validation failed (missing_subject)")
        raise Unauthorized()

    context = {"sub": principal_id}
    if claims.username:
        context["username"] = claims.username
    if claims.email:
        context["email"] = claims.email

    logger.info(f"Authorized {principal_id} for {request.method_arn}")

    return AuthorizerResponse(
        principal_id=principal_id,
        policy_document=generate_policy("Allow", request.method_arn),
        context=context,
    )
