"""
MessageEncryptor — encrypt values stored somewhere you don't trust.

Supported ciphers:

- ``aes-cbc``: Rails default until 5.2. Encryption alone is subject to
  padding oracle attacks, so ``encrypt_and_sign`` always signs the result
  with a ``MessageVerifier``.
- ``aes-256-gcm``: Rails 5.2+ default. Authenticated by the cipher and
  never signed further. Prefer it for new applications.

Security Note:
    Never log plaintext, ciphertext or keys.
"""
import logging
from typing import Any, Optional

from .ciphers import CODECS, AesCbcCodec
from .config import (
    CbcConfig,
    EncryptorConfig,
    GcmConfig,
    build_config,
)
from .exceptions import CipherError, DeserializationError
from .serializers import Serializer, JSONSerializer
from .verifier import MessageVerifier

logger = logging.getLogger("cookie_crypto")

# Trailing byte some Rails versions leave after unpadding; never valid JSON.
_RAILS_PAD_BYTE = b"\x10"


class MessageEncryptor:
    """Encrypt and sign (or authenticate) arbitrary serializable values.

    Args:
        key: encryption key; keys longer than 32 bytes are truncated.
        sign_key: HMAC key for the default SHA-1 verifier (aes-cbc only).
        cipher: ``"aes-cbc"`` (default) or ``"aes-256-gcm"``.
        verifier: explicit verifier (aes-cbc only).
        serializer: payload serializer, JSON by default.
    """

    def __init__(
        self,
        key: bytes,
        sign_key: Optional[bytes] = None,
        cipher: Optional[str] = None,
        verifier: Optional[MessageVerifier] = None,
        serializer: Optional[Serializer] = None,
    ):
        self._setup(
            build_config(
                key,
                sign_key=sign_key,
                cipher=cipher,
                verifier=verifier,
                serializer=serializer,
            )
        )

    @classmethod
    def from_config(cls, config: EncryptorConfig) -> "MessageEncryptor":
        """Create an encryptor from an already validated configuration."""
        obj = cls.__new__(cls)
        obj._setup(config)
        return obj

    def _setup(self, config: EncryptorConfig) -> None:
        self._config = config
        self._codec = self._codec_for(config)
        logger.debug(
            "MessageEncryptor ready: cipher=%s serializer=%s",
            config.cipher, config.serializer.name,
        )

    @staticmethod
    def _codec_for(config: EncryptorConfig):
        codec_cls = CODECS.get(config.cipher)
        if codec_cls is None:
            raise CipherError(
                f"cipher not set or not supported: {config.cipher!r}"
            )
        return codec_cls(config.key)

    @property
    def config(self) -> EncryptorConfig:
        """Validated configuration (``CbcConfig`` or ``GcmConfig``)."""
        return self._config

    @property
    def cipher(self) -> str:
        """Cipher name, ``"aes-cbc"`` or ``"aes-256-gcm"``."""
        return self._config.cipher

    @property
    def serializer(self) -> Serializer:
        """Payload serializer."""
        return self._config.serializer

    @property
    def verifier(self) -> Optional[MessageVerifier]:
        """Signing verifier for aes-cbc; None for aes-256-gcm."""
        if isinstance(self._config, CbcConfig):
            return self._config.verifier
        return None

    def __repr__(self) -> str:
        return (
            f"<MessageEncryptor cipher={self.cipher} "
            f"serializer={self.serializer!r}>"
        )

    # ------------------------------------------------------------------
    # Signed / authenticated messages
    # ------------------------------------------------------------------

    def encrypt_and_sign(self, value: Any) -> str:
        """Encrypt ``value`` and sign it (aes-cbc) or authenticate it (gcm).

        This is the method to use; ``encrypt`` alone is not safe for aes-cbc.
        """
        if isinstance(self._config, GcmConfig):
            return self.encrypt(value)
        return self._config.verifier.generate(self.encrypt(value))

    def decrypt_and_verify(self, token: str, target: Optional[Any] = None) -> Any:
        """Verify or authenticate ``token`` and return the decrypted value.

        Raises:
            FormatError: malformed token.
            AuthenticationError: bad signature or auth tag.
        """
        if isinstance(self._config, GcmConfig):
            return self.decrypt(token, target)
        inner = self._config.verifier.verify(token, str)
        return self.decrypt(inner, target)

    # ------------------------------------------------------------------
    # Raw encryption
    # ------------------------------------------------------------------

    def encrypt(self, value: Any) -> str:
        """Serialize and encrypt ``value``; the result is NOT signed."""
        plaintext = self.serializer.serialize(value).encode("utf-8")
        return self._codec.encrypt(plaintext)

    def decrypt(self, token: str, target: Optional[Any] = None) -> Any:
        """Decrypt an unsigned token produced by ``encrypt``."""
        plaintext = self._codec.decrypt(token)
        if isinstance(self._codec, AesCbcCodec) and isinstance(self.serializer, JSONSerializer):
            plaintext = plaintext.rstrip(_RAILS_PAD_BYTE)
        try:
            text = plaintext.decode("utf-8")
        except UnicodeDecodeError as err:
            raise DeserializationError("Decrypted payload is not UTF-8 text") from err
        return self.serializer.deserialize(text, target)
