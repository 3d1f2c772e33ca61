"""
Key derivation — PBKDF2 keys derived from a single application secret.

Rails derives every cookie key from ``secret_key_base`` with
PBKDF2-HMAC-SHA1 and 1000 iterations. Both constants must match the other
side exactly, otherwise the derived keys (and every token) differ.

Security Note:
    Never log key material. Only log salt lengths, key sizes and
    iteration counts.
"""
import os
import threading
import logging
from typing import Optional, Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .exceptions import ConfigurationError, SecretNotSet

logger = logging.getLogger("cookie_crypto")

DEFAULT_ITERATIONS = 1000  # Rails 4+ cookie default
DEFAULT_KEY_SIZE = 64  # Rails generate_key default

BytesLike = Union[str, bytes]


def _as_bytes(value: BytesLike) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def generate_random_key(length: int = 32) -> bytes:
    """Return ``length`` cryptographically random bytes.

    Useful when a key does not need to be derived from a shared secret.
    """
    if length <= 0:
        raise ConfigurationError(f"Key length must be positive, got {length}")
    return os.urandom(length)


class KeyGenerator:
    """Derive purpose-specific keys from one secret.

    Applications keep a single secret and derive a different key per use
    (encryption, signing...) by varying the salt. Derived keys are
    memoized per instance by ``cached_derive``; the cache is guarded by a
    lock and lives as long as the generator.

    Args:
        secret: master secret (``str`` is UTF-8 encoded).
        iterations: PBKDF2 iteration count.
        algorithm: PBKDF2 PRF hash (SHA-1 for Rails interop).
    """

    def __init__(
        self,
        secret: BytesLike,
        iterations: int = DEFAULT_ITERATIONS,
        algorithm: Optional[hashes.HashAlgorithm] = None,
    ):
        if not secret:
            raise SecretNotSet()
        if iterations <= 0:
            raise ConfigurationError(
                f"Iterations must be positive, got {iterations}"
            )
        self._secret = _as_bytes(secret)
        self._iterations = iterations
        self._algorithm = algorithm or hashes.SHA1()
        self._cache: dict[tuple[bytes, int], bytes] = {}
        self._lock = threading.Lock()

    @property
    def iterations(self) -> int:
        return self._iterations

    def derive(self, salt: BytesLike, key_size: int = DEFAULT_KEY_SIZE) -> bytes:
        """Derive a ``key_size``-byte key for ``salt``.

        Identical inputs always yield identical bytes.
        """
        if key_size <= 0:
            raise ConfigurationError(f"Key size must be positive, got {key_size}")
        salt = _as_bytes(salt)
        kdf = PBKDF2HMAC(
            algorithm=self._algorithm,
            length=key_size,
            salt=salt,
            iterations=self._iterations,
        )
        logger.debug(
            "Derived %d-byte key (salt_len=%d, iterations=%d)",
            key_size, len(salt), self._iterations,
        )
        return kdf.derive(self._secret)

    def cached_derive(self, salt: BytesLike, key_size: int = DEFAULT_KEY_SIZE) -> bytes:
        """Return the memoized key for ``(salt, key_size)``, deriving it once."""
        cache_key = (_as_bytes(salt), key_size)
        with self._lock:
            key = self._cache.get(cache_key)
            if key is None:
                key = self.derive(cache_key[0], key_size)
                self._cache[cache_key] = key
            return key

    def is_cached(self, salt: BytesLike, key_size: int = DEFAULT_KEY_SIZE) -> bool:
        with self._lock:
            return (_as_bytes(salt), key_size) in self._cache
