"""JWKS retrieval and time-bounded caching of provider signing keys."""

import logging
import threading
import time
from collections.abc import Callable

import requests
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from pydantic import ValidationError

from .errors import FetchError, KeyNotFoundError, ParseError
from .keys import decode_signing_key
from .models import SigningKeySet

logger = logging.getLogger(__name__)

DEFAULT_TTL = 3600


class JWKSCache:
    """Public keys of one provider, keyed by key id.

    The whole key set shares one refresh timestamp and is discarded at once
    when it is older than `ttl` seconds. Keys are only added after they were
    fetched and decoded successfully.
    """

    def __init__(
        self,
        jwks_url: str,
        ttl: float = DEFAULT_TTL,
        timeout: float = 10,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.jwks_url = jwks_url
        self.ttl = ttl
        self.timeout = timeout
        self._clock = clock
        self._lock = threading.Lock()
        self._keys: dict[str, RSAPublicKey] = {}
        self._last_refreshed = 0.0

    def resolve(self, kid: str) -> RSAPublicKey:
        """Return the public key for `kid`, fetching the key set on a miss.

        Raises:
            FetchError: If the key endpoint cannot be reached
            ParseError: If the key endpoint returns a malformed key set
            KeyNotFoundError: If no published key has the given id
            KeyDecodeError: If the matching key cannot be decoded
        """
        with self._lock:
            if self._clock() - self._last_refreshed > self.ttl and self._keys:
                logger.debug(f"Discarding {len(self._keys)} expired JWKS keys")
                self._keys = {}

            key = self._keys.get(kid)

        if key is not None:
            return key

        # Fetch without holding the lock, concurrent misses may both fetch
        key_set = self.fetch()

        record = key_set.find_key(kid)
        if record is None:
            raise KeyNotFoundError(f"Key {kid} not found at {self.jwks_url}")

        key = decode_signing_key(record)

        with self._lock:
            self._keys[record.kid] = key
            self._last_refreshed = self._clock()

        return key

    def fetch(self) -> SigningKeySet:
        """Download and parse the provider key set."""
        logger.info(f"Fetching JWKS from {self.jwks_url}")

        try:
            response = requests.get(self.jwks_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Failed to fetch JWKS from {self.jwks_url}: {e}") from e

        try:
            return SigningKeySet.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ParseError(f"Malformed JWKS from {self.jwks_url}: {e}") from e

    def clear(self) -> None:
        with self._lock:
            self._keys = {}
            self._last_refreshed = 0.0

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)
