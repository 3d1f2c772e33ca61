"""
Rails session cookies — secret_key_base, documented salts and encryptors.

Reads settings from environment variables:
    SECRET_KEY_BASE = <the Rails app secret_key_base>
    COOKIE_CIPHER = aes-256-gcm | aes-cbc
    COOKIE_KDF_ITERATIONS = <integer, default 1000>

Rails derives the cookie keys from ``secret_key_base``:

- aes-cbc (Rails 4+): 32-byte key from "encrypted cookie" and 64-byte
  signing key from "signed encrypted cookie".
- aes-256-gcm (Rails 5.2+): 32-byte key from
  "authenticated encrypted cookie".

Security Note:
    Never log secret_key_base or derived keys.
"""
import os
import secrets
import logging
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from .config import CBC, GCM
from .encryptor import MessageEncryptor
from .keys import DEFAULT_ITERATIONS, KeyGenerator
from .serializers import Serializer

logger = logging.getLogger("cookie_crypto")

ENCRYPTION_KEY_SIZE = 32
SIGNING_KEY_SIZE = 64


def load_secret_key_base() -> str:
    """Read secret_key_base from the SECRET_KEY_BASE env var.

    Raises:
        RuntimeError: If SECRET_KEY_BASE is not set.
    """
    value = os.environ.get("SECRET_KEY_BASE")
    if not value:
        raise RuntimeError(
            "SECRET_KEY_BASE environment variable is not set"
        )
    return value


def generate_secret_key_base() -> str:
    """Generate a random secret_key_base (128 hex characters, as Rails does)."""
    return secrets.token_hex(64)


class CookieSettings(BaseModel):
    """Validated cookie encryption settings."""

    secret_key_base: str = Field(min_length=32, repr=False)
    cipher: Literal["aes-cbc", "aes-256-gcm"] = GCM
    iterations: int = Field(default=DEFAULT_ITERATIONS, ge=1)
    encrypted_cookie_salt: str = "encrypted cookie"
    encrypted_signed_cookie_salt: str = "signed encrypted cookie"
    authenticated_encrypted_cookie_salt: str = "authenticated encrypted cookie"

    @classmethod
    def from_env(cls) -> "CookieSettings":
        """Create CookieSettings by loading values from environment.

        Returns:
            Populated CookieSettings instance.
        """
        return cls(
            secret_key_base=load_secret_key_base(),
            cipher=os.environ.get("COOKIE_CIPHER", GCM),
            iterations=int(
                os.environ.get("COOKIE_KDF_ITERATIONS", DEFAULT_ITERATIONS)
            ),
        )


class CookieCodec:
    """Read and write Rails encrypted session cookies.

    Args:
        settings: cookie settings (see ``CookieSettings.from_env``).
        serializer: payload serializer, JSON by default.
    """

    def __init__(self, settings: CookieSettings, serializer: Optional[Serializer] = None):
        self.settings = settings
        self.key_generator = KeyGenerator(
            settings.secret_key_base, iterations=settings.iterations,
        )
        if settings.cipher == CBC:
            self.encryptor = MessageEncryptor(
                self.key_generator.cached_derive(
                    settings.encrypted_cookie_salt, ENCRYPTION_KEY_SIZE,
                ),
                sign_key=self.key_generator.cached_derive(
                    settings.encrypted_signed_cookie_salt, SIGNING_KEY_SIZE,
                ),
                cipher=CBC,
                serializer=serializer,
            )
        else:
            self.encryptor = MessageEncryptor(
                self.key_generator.cached_derive(
                    settings.authenticated_encrypted_cookie_salt,
                    ENCRYPTION_KEY_SIZE,
                ),
                cipher=GCM,
                serializer=serializer,
            )
        logger.debug("Cookie codec configured for %s", settings.cipher)

    @classmethod
    def from_env(cls, serializer: Optional[Serializer] = None) -> "CookieCodec":
        """Create a CookieCodec from ``CookieSettings.from_env``.

        Raises:
            RuntimeError: If SECRET_KEY_BASE is not set.
        """
        return cls(CookieSettings.from_env(), serializer=serializer)

    def dump(self, value: Any) -> str:
        """Encrypt ``value`` into a cookie string."""
        return self.encryptor.encrypt_and_sign(value)

    def load(self, cookie: str, target: Optional[Any] = None) -> Any:
        """Decrypt a cookie string produced by Rails or by ``dump``."""
        return self.encryptor.decrypt_and_verify(cookie, target)
