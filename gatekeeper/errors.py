"""Exceptions raised while configuring validators and validating tokens."""


class GatekeeperError(Exception):
    """Base class for all gatekeeper errors."""


class ConfigurationError(GatekeeperError):
    """Raised when a required setup value is missing or invalid."""


class TokenValidationError(GatekeeperError):
    """Raised when a token must be denied.

    `kind` is a stable name for logging; it never reaches the client.
    """

    kind = "token_validation"


class FetchError(TokenValidationError):
    """Raised when the JWKS endpoint is unreachable or returns an error."""

    kind = "fetch"


class ParseError(TokenValidationError):
    """Raised when the JWKS endpoint returns a malformed key set."""

    kind = "parse"


class KeyNotFoundError(TokenValidationError):
    """Raised when the key id is absent from the published key set."""

    kind = "key_not_found"


class KeyDecodeError(TokenValidationError):
    """Raised when a published key cannot be decoded into a public key."""

    kind = "key_decode"


class MalformedTokenError(TokenValidationError):
    kind = "malformed_token"


class UnsupportedAlgorithmError(TokenValidationError):
    kind = "unsupported_algorithm"


class MissingKeyIdError(TokenValidationError):
    kind = "missing_key_id"


class InvalidSignatureError(TokenValidationError):
    kind = "invalid_signature"


class TokenExpiredError(TokenValidationError):
    kind = "token_expired"


class TokenNotYetValidError(TokenValidationError):
    kind = "token_not_yet_valid"


class IssuerMismatchError(TokenValidationError):
    kind = "issuer_mismatch"


class AudienceMismatchError(TokenValidationError):
    kind = "audience_mismatch"
