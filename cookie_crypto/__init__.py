"""Cookie Crypto — Rails-compatible signed and encrypted messages.

Messages can be shared between a Rails application and a Python one
using only ``secret_key_base``:

- ``MessageVerifier``: signed, readable messages.
- ``MessageEncryptor``: encrypted messages (aes-cbc + HMAC, aes-256-gcm).
- ``KeyGenerator``: PBKDF2 keys derived from one secret.
- ``CookieCodec``: the Rails session cookie flow on top of those.
"""

from .version import __version__
from .exceptions import (
    CookieCryptoError,
    ConfigurationError,
    SecretNotSet,
    HasherNotSet,
    SerializerNotSet,
    CipherError,
    InvalidMessage,
    FormatError,
    AuthenticationError,
    SerializationError,
    DeserializationError,
)
from .serializers import Serializer, JSONSerializer, XMLSerializer, NullSerializer
from .keys import KeyGenerator, generate_random_key
from .verifier import MessageVerifier
from .config import CbcConfig, GcmConfig, build_config
from .encryptor import MessageEncryptor
from .cookies import (
    CookieCodec,
    CookieSettings,
    load_secret_key_base,
    generate_secret_key_base,
)

__all__ = [
    "__version__",
    "CookieCryptoError",
    "ConfigurationError",
    "SecretNotSet",
    "HasherNotSet",
    "SerializerNotSet",
    "CipherError",
    "InvalidMessage",
    "FormatError",
    "AuthenticationError",
    "SerializationError",
    "DeserializationError",
    "Serializer",
    "JSONSerializer",
    "XMLSerializer",
    "NullSerializer",
    "KeyGenerator",
    "generate_random_key",
    "MessageVerifier",
    "CbcConfig",
    "GcmConfig",
    "build_config",
    "MessageEncryptor",
    "CookieCodec",
    "CookieSettings",
    "load_secret_key_base",
    "generate_secret_key_base",
]
