"""API endpoints and Lambda entry point for the authorizer."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from pydantic import ValidationError

from . import __version__
from .authorizer import Unauthorized, authorize
from .config import load_settings
from .models import AuthorizerRequest
from .oidc import TokenValidator

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_validator() -> TokenValidator:
    """Build a validator from environment settings.

    Raises:
        ConfigurationError: If a required setting is missing
    """
    settings = load_settings()
    config = settings.validator_config()
    logger.info(f"Validating tokens issued by {config.expected_issuer}")
    return TokenValidator(config)


# Build the validator, and with it the JWKS cache, once on app startup
# See https://fastapi.tiangolo.com/advanced/events/
@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.validator = create_validator()
    yield
    app.state.validator.jwks_cache.clear()


app = FastAPI(
    title="Gatekeeper",
    description="Bearer token authorizer for OIDC identity providers",
    version=__version__,
    lifespan=lifespan,
)


def _unauthorized():
    """Return 401"""
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
    )


@app.get("/health")
async def health():
    return {"status": "ok", "version": __version__}


@app.post("/authorize", status_code=status.HTTP_200_OK)
def authorize_request(payload: AuthorizerRequest, request: Request):
    """Validate the bearer token and return an Allow policy for its principal.

    Every validation failure results in the same 401 response.
    """
    validator: TokenValidator = request.app.state.validator

    try:
        response = authorize(payload, validator)
    except Unauthorized:
        _unauthorized()

    return response.to_dict()


_lambda_validator: TokenValidator | None = None


def lambda_handler(event: dict, context) -> dict:
    """API Gateway token authorizer entry point.

    The validator is reused across invocations of a warm container, so its
    JWKS cache survives between requests. Denials raise "Unauthorized",
    which API Gateway turns into a 401 response.
    """
    global _lambda_validator
    if _lambda_validator is None:
        _lambda_validator = create_validator()

    try:
        payload = AuthorizerRequest.model_validate(event)
    except ValidationError as e:
        logger.warning(f"Malformed authorizer event: {e}")
        raise Exception("Unauthorized") from e

    try:
        response = authorize(payload, _lambda_validator)
    except Unauthorized as e:
        raise Exception("Unauthorized") from e

    return response.to_dict()
