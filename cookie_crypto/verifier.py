"""
MessageVerifier — signed (but readable) messages.

A signed message is ``base64(serialized value) + "--" + hex(HMAC)``. The
payload can be read by anyone; tampering is detected on ``verify``. Use
this for remember-me tokens or unsubscribe links where confidentiality
is not needed, and ``MessageEncryptor`` otherwise.
"""
import hmac
import logging
from typing import Any, Callable, Optional, Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as crypto_hmac

from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    FormatError,
    HasherNotSet,
    InvalidMessage,
    SecretNotSet,
    SerializerNotSet,
)
from .serializers import Serializer, JSONSerializer
from .wire import b64decode, b64encode, join_segments, split_segments

logger = logging.getLogger("cookie_crypto")

_HASHERS: dict[str, type] = {
    "sha1": hashes.SHA1,
    "sha256": hashes.SHA256,
    "sha512": hashes.SHA512,
    "md5": hashes.MD5,
}

_INVALID = "Invalid signature - "

Hasher = Union[str, hashes.HashAlgorithm, type, Callable, None]

# Default marker: ``serializer=None`` means "not set", not "use the default".
_DEFAULT = object()


def resolve_hasher(hasher: Hasher) -> Optional[hashes.HashAlgorithm]:
    """Map a hasher setting to a ``cryptography`` HashAlgorithm.

    Accepts a hash name (``"sha1"``, ``"sha256"``...), a HashAlgorithm
    instance or class, or a hashlib constructor such as ``hashlib.sha1``.

    Raises:
        ConfigurationError: If the hash is not supported.
    """
    if hasher is None or isinstance(hasher, hashes.HashAlgorithm):
        return hasher
    if isinstance(hasher, type) and issubclass(hasher, hashes.HashAlgorithm):
        return hasher()
    name = hasher
    if callable(hasher):
        name = getattr(hasher(), "name", None)
    if not isinstance(name, str) or name.lower() not in _HASHERS:
        raise ConfigurationError(
            f"Unsupported hasher {hasher!r}, expected one of {sorted(_HASHERS)}"
        )
    return _HASHERS[name.lower()]()


class MessageVerifier:
    """Generate and verify HMAC-signed messages.

    Args:
        secret: HMAC key (``str`` is UTF-8 encoded).
        hasher: hash name, ``cryptography`` HashAlgorithm or hashlib
            constructor.
        serializer: payload serializer, JSON by default.

    Missing settings are reported by ``check_config`` before any
    cryptographic work, on every ``generate`` and ``verify``.
    """

    def __init__(
        self,
        secret: Union[str, bytes, None],
        hasher: Hasher = "sha1",
        serializer: Optional[Serializer] = _DEFAULT,
    ):
        if serializer is _DEFAULT:
            serializer = JSONSerializer()
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        self._secret = secret or None
        self._hasher = resolve_hasher(hasher)
        self._serializer = serializer

    @property
    def hasher(self) -> Optional[hashes.HashAlgorithm]:
        """Resolved hash algorithm, or None when unset."""
        return self._hasher

    @property
    def serializer(self) -> Optional[Serializer]:
        """Payload serializer, or None when unset."""
        return self._serializer

    def __repr__(self) -> str:
        hasher = self._hasher.name if self._hasher else None
        return f"<MessageVerifier hasher={hasher} serializer={self._serializer!r}>"

    def check_config(self) -> None:
        """Raise the ConfigurationError kind for the first missing setting."""
        if self._serializer is None:
            raise SerializerNotSet()
        if self._hasher is None:
            raise HasherNotSet()
        if self._secret is None:
            raise SecretNotSet()

    def is_valid(self) -> bool:
        """Return True when secret, hasher and serializer are all set."""
        try:
            self.check_config()
        except ConfigurationError:
            return False
        return True

    def digest_for(self, data: str) -> str:
        """Lower-case hex HMAC of ``data`` under the configured secret and hash."""
        if self._secret is None:
            raise SecretNotSet()
        if self._hasher is None:
            raise HasherNotSet()
        mac = crypto_hmac.HMAC(self._secret, self._hasher)
        mac.update(data.encode("utf-8"))
        return mac.finalize().hex()

    def generate(self, value: Any) -> str:
        """Serialize ``value`` and return ``base64(data)--digest``."""
        self.check_config()
        data = b64encode(self._serializer.serialize(value).encode("utf-8"))
        return join_segments(data, self.digest_for(data))

    def _verified_data(self, token: str) -> str:
        if not token:
            raise FormatError(_INVALID + "empty message")
        data, digest = split_segments(token, 2, _INVALID + "bad data")
        if not hmac.compare_digest(
            digest.encode("utf-8"), self.digest_for(data).encode("utf-8")
        ):
            logger.debug("Rejected signed message")
            raise AuthenticationError(_INVALID + "bad data")
        return data

    def verify(self, token: str, target: Optional[Any] = None) -> Any:
        """Check the signature of ``token`` and return its payload.

        Raises:
            FormatError: token is empty or not ``data--digest``.
            AuthenticationError: digest does not match.
        """
        self.check_config()
        data = self._verified_data(token)
        try:
            text = b64decode(data).decode("utf-8")
        except UnicodeDecodeError as err:
            raise FormatError(_INVALID + "bad data") from err
        return self._serializer.deserialize(text, target)

    def valid_message(self, token: str) -> bool:
        """Return True if ``token`` is well formed and correctly signed."""
        self.check_config()
        try:
            self._verified_data(token)
        except InvalidMessage:
            return False
        return True
