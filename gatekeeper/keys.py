"""Reconstruction of RSA public keys from published JSON Web Keys."""

import base64
import binascii

from cryptography.hazmat.primitives.asymmetric.rsa import (
    RSAPublicKey,
    RSAPublicNumbers,
)

from .errors import KeyDecodeError
from .models import SigningKeyRecord


def base64url_decode(value: str) -> bytes:
    """Decode URL-safe base64, restoring any stripped "=" padding."""
    if not value:
        raise KeyDecodeError("Empty base64url value")

    if "+" in value or "/" in value:
        raise KeyDecodeError("Invalid base64url value: standard base64 alphabet")

    if remainder := len(value) % 4:
        value += "=" * (4 - remainder)

    try:
        decoded = base64.b64decode(
            value.encode("ascii"), altchars=b"-_", validate=True
        )
    except (binascii.Error, UnicodeEncodeError) as e:
        raise KeyDecodeError(f"Invalid base64url value: {e}") from e

    if not decoded:
        raise KeyDecodeError("Empty base64url value")

    return decoded


def decode_exponent(value: str) -> int:
    """Decode a public exponent as a 32-bit big-endian unsigned integer.

    Short exponents (e.g. "AQAB", 3 bytes) are left-padded with zero bytes,
    longer ones are truncated to their first 4 bytes.
    """
    raw = base64url_decode(value)
    return int.from_bytes(raw.rjust(4, b"\x00")[:4], "big")


def decode_modulus(value: str) -> int:
    return int.from_bytes(base64url_decode(value), "big")


def decode_signing_key(record: SigningKeyRecord) -> RSAPublicKey:
    """Build an RSA public key from a published key record.

    Raises:
        KeyDecodeError: If the record is not an RSA key or its modulus or
            exponent cannot be decoded
    """
    if record.kty != "RSA":
        raise KeyDecodeError(f"Unsupported key type {record.kty!r} for {record.kid}")

    modulus = decode_modulus(record.n)
    exponent = decode_exponent(record.e)

    try:
        return RSAPublicNumbers(exponent, modulus).public_key()
    except ValueError as e:
        raise KeyDecodeError(f"Invalid RSA key {record.kid}: {e}") from e
