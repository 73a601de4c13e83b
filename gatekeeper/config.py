"""Application settings."""

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError
from .models import ValidatorConfig

DEFAULT_PROVIDER_BASE_URL = "https://cognito-idp.{region}.amazonaws.com"


class Settings(BaseSettings):
    """Application settings loaded from environment variables

    e.g. GATEKEEPER_USER_POOL_ID -> user_pool_id
    """

    region: str
    """
    Region of the identity provider, e.g. "eu-west-1"
    """

    user_pool_id: str
    """
    Identifier of the user pool that issues the tokens
    """

    client_id: str
    """
    App client ID expected in the "client_id" claim of access tokens
    """

    expected_audience: str | None = None
    """
    Expected value for "aud" claim in ID tokens, defaults to client_id
    """

    require_audience: bool = False
    """
    Deny tokens without any "client_id" or "aud" claim
    """

    provider_base_url: str = DEFAULT_PROVIDER_BASE_URL
    """
    Base URL of the identity provider, "{region}" is substituted
    """

    jwks_cache_ttl: float = 3600
    """
    Seconds after which cached signing keys are discarded
    """

    jwks_fetch_timeout: float = 10
    """
    Timeout in seconds for fetching the provider JWKS
    """

    model_config = SettingsConfigDict(
        env_prefix="GATEKEEPER_", use_attribute_docstrings=True
    )

    def validator_config(self) -> ValidatorConfig:
        return build_validator_config(
            self.region,
            self.user_pool_id,
            self.client_id,
            expected_audience=self.expected_audience,
            require_audience=self.require_audience,
            provider_base_url=self.provider_base_url,
            cache_ttl=self.jwks_cache_ttl,
            fetch_timeout=self.jwks_fetch_timeout,
        )


def load_settings() -> Settings:
    """Load settings from the environment.

    Raises:
        ConfigurationError: If a required value is missing or invalid
    """
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as e:
        missing = ", ".join(
            "GATEKEEPER_" + str(error["loc"][0]).upper() for error in e.errors()
        )
        raise ConfigurationError(f"Invalid or missing settings: {missing}") from e


def build_validator_config(
    region: str,
    user_pool_id: str,
    client_id: str,
    expected_audience: str | None = None,
    require_audience: bool = False,
    provider_base_url: str = DEFAULT_PROVIDER_BASE_URL,
    cache_ttl: float = 3600,
    fetch_timeout: float = 10,
) -> ValidatorConfig:
    """Derive issuer and key endpoint of a user pool.

    The issuer is "<provider base>/<pool id>" and its keys are published at
    "<issuer>/.well-known/jwks.json".

    Raises:
        ConfigurationError: If region, user pool ID or client ID is empty
    """
    for name, value in (
        ("region", region),
        ("user_pool_id", user_pool_id),
        ("client_id", client_id),
    ):
        if not value:
            raise ConfigurationError(f"Missing required setting: {name}")

    base_url = provider_base_url.format(region=region).rstrip("/")
    issuer = f"{base_url}/{user_pool_id}"

    return ValidatorConfig(
        jwks_url=f"{issuer}/.well-known/jwks.json",
        expected_issuer=issuer,
        expected_client_id=client_id,
        expected_audience=expected_audience or client_id,
        require_audience=require_audience,
        cache_ttl=cache_ttl,
        fetch_timeout=fetch_timeout,
    )
