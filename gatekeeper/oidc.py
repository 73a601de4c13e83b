"""OIDC token validation and signature verification."""

import logging
import math
import time
from collections.abc import Callable, Iterator, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

import jwt

from .errors import (
    AudienceMismatchError,
    InvalidSignatureError,
    IssuerMismatchError,
    MalformedTokenError,
    MissingKeyIdError,
    TokenExpiredError,
    TokenNotYetValidError,
    UnsupportedAlgorithmError,
)
from .jwks import JWKSCache
from .models import ValidatorConfig

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


class SigningAlgorithm(str, Enum):
    """Asymmetric RSA signature algorithms accepted in token headers."""

    RS256 = "RS256"
    RS384 = "RS384"
    RS512 = "RS512"

    @classmethod
    def from_header(cls, header: Mapping[str, Any]) -> "SigningAlgorithm":
        alg = header.get("alg")
        try:
            return cls(alg)
        except ValueError:
            raise UnsupportedAlgorithmError(
                f"Unsupported signing algorithm: {alg!r}"
            ) from None


class TokenClaims(Mapping[str, Any]):
    """Read-only claims of a fully validated token.

    Typed accessors return None when a claim is absent or has an unexpected
    type.
    """

    def __init__(self, claims: Mapping[str, Any]) -> None:
        self._claims = MappingProxyType(dict(claims))

    def __getitem__(self, name: str) -> Any:
        return self._claims[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._claims)

    def __len__(self) -> int:
        return len(self._claims)

    def __repr__(self) -> str:
        return f"TokenClaims({dict(self._claims)!r})"

    def get_str(self, name: str) -> str | None:
        value = self._claims.get(name)
        return value if isinstance(value, str) else None

    @property
    def subject(self) -> str | None:
        return self.get_str("sub")

    @property
    def issuer(self) -> str | None:
        return self.get_str("iss")

    @property
    def client_id(self) -> str | None:
        return self.get_str("client_id")

    @property
    def audience(self) -> str | None:
        return self.get_str("aud")

    @property
    def token_use(self) -> str | None:
        return self.get_str("token_use")

    @property
    def username(self) -> str | None:
        return self.get_str("cognito:username") or self.get_str("username")

    @property
    def email(self) -> str | None:
        return self.get_str("email")

    @property
    def expires_at(self) -> float | None:
        return _numeric_date(self._claims.get("exp"))

    @property
    def not_before(self) -> float | None:
        return _numeric_date(self._claims.get("nbf"))

    @property
    def issued_at(self) -> float | None:
        return _numeric_date(self._claims.get("iat"))


def _numeric_date(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


def strip_scheme(token: str) -> str:
    """Remove a leading "Bearer " label from an authorization value."""
    token = token.strip()
    if token[: len(BEARER_PREFIX)].lower() == BEARER_PREFIX:
        token = token[len(BEARER_PREFIX) :].lstrip()
    return token


class TokenValidator:
    """Validates provider-issued bearer tokens against the published JWKS.

    Each validator owns its own `JWKSCache`; pass `jwks_cache` to share one
    between validators of the same provider.
    """

    def __init__(
        self,
        config: ValidatorConfig,
        jwks_cache: JWKSCache | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        if jwks_cache is None:
            jwks_cache = JWKSCache(
                config.jwks_url,
                ttl=config.cache_ttl,
                timeout=config.fetch_timeout,
                clock=clock,
            )
        self.jwks_cache = jwks_cache
        self._clock = clock

    def validate(self, token: str) -> TokenClaims:
        """Verify a token and return its claims.

        Validation runs in order and stops at the first failure:
        1. Parses header and payload
        2. Checks the declared signing algorithm
        3. Resolves the signing key by "kid"
        4. Verifies the signature
        5. Checks "exp", "nbf", "iat", "iss" and "client_id"/"aud"

        Raises:
            TokenValidationError: Subclass naming the failed step
        """
        token = strip_scheme(token)

        # Parse
        try:
            header = jwt.get_unverified_header(token)
            jwt.decode(token, options=dict(verify_signature=False))
        except jwt.PyJWTError as e:
            raise MalformedTokenError(f"Malformed token: {e}") from e

        algorithm = SigningAlgorithm.from_header(header)

        kid = header.get("kid")
        if not isinstance(kid, str) or not kid:
            raise MissingKeyIdError("Token header has no key id")

        public_key = self.jwks_cache.resolve(kid)

        try:
            claims = jwt.decode(
                token,
                public_key,
                algorithms=[algorithm.value],
                options=dict(
                    verify_signature=True,
                    verify_exp=False,
                    verify_nbf=False,
                    verify_iat=False,
                    verify_aud=False,
                    verify_iss=False,
                ),
            )
        except jwt.InvalidSignatureError as e:
            raise InvalidSignatureError("Token signature verification failed") from e
        except jwt.PyJWTError as e:
            raise MalformedTokenError(f"Malformed token: {e}") from e

        self._check_expiry(claims)
        self._check_not_before(claims)
        self._check_issuer(claims)
        self._check_audience(claims)

        logger.debug(f"Validated token for subject {claims.get('sub')!r}")
        return TokenClaims(claims)

    def _check_expiry(self, claims: dict[str, Any]) -> None:
        exp = TokenClaims(claims).expires_at
        if exp is None:
            raise TokenExpiredError("Token has no valid expiry")

        if exp < self._clock():
            raise TokenExpiredError("Token has expired")

    def _check_not_before(self, claims: dict[str, Any]) -> None:
        # Optional claims, but a present value must be a date not in the future
        token_claims = TokenClaims(claims)
        now = self._clock()
        for name, value in (
            ("nbf", token_claims.not_before),
            ("iat", token_claims.issued_at),
        ):
            if name not in claims:
                continue
            if value is None:
                raise TokenNotYetValidError(f"Token has an invalid {name!r} claim")
            if value > now:
                raise TokenNotYetValidError(f"Token {name!r} is in the future")

    def _check_issuer(self, claims: dict[str, Any]) -> None:
        if claims.get("iss") != self.config.expected_issuer:
            raise IssuerMismatchError(f"Unexpected issuer: {claims.get('iss')!r}")

    def _check_audience(self, claims: dict[str, Any]) -> None:
        # Access tokens carry "client_id", ID tokens carry "aud"
        client_id = claims.get("client_id")
        if "client_id" in claims and client_id != self.config.expected_client_id:
            raise AudienceMismatchError(f"Unexpected client id: {client_id!r}")

        if "aud" in claims and claims["aud"] != self.config.expected_audience:
            raise AudienceMismatchError(f"Unexpected audience: {claims['aud']!r}")

        if (
            self.config.require_audience
            and "client_id" not in claims
            and "aud" not in claims
        ):
            raise AudienceMismatchError("Token has neither client id nor audience")
