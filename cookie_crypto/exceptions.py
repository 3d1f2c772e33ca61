"""
Exception hierarchy for cookie_crypto.

Every error raised by the library derives from ``CookieCryptoError``.
``FormatError`` and ``AuthenticationError`` share ``InvalidMessage`` so a
caller can reject a cookie without caring which check failed.
"""


class CookieCryptoError(Exception):
    """Base class for all cookie_crypto errors."""


class ConfigurationError(CookieCryptoError):
    """A verifier or encryptor is missing a required setting."""


class SecretNotSet(ConfigurationError):
    def __init__(self, message: str = "Secret not set"):
        super().__init__(message)


class HasherNotSet(ConfigurationError):
    def __init__(self, message: str = "Hasher not set"):
        super().__init__(message)


class SerializerNotSet(ConfigurationError):
    def __init__(self, message: str = "Serializer not set"):
        super().__init__(message)


class CipherError(CookieCryptoError):
    """Unsupported or unknown cipher name."""


class InvalidMessage(CookieCryptoError):
    """A token could not be verified or decrypted."""


class FormatError(InvalidMessage, ValueError):
    """Token is structurally malformed (segments, base64, lengths)."""


class AuthenticationError(InvalidMessage):
    """Signature or authentication tag mismatch."""


class SerializationError(CookieCryptoError, TypeError):
    """A value cannot be represented by the chosen serializer."""


class DeserializationError(CookieCryptoError, ValueError):
    """Serialized text is malformed or does not fit the target shape."""
