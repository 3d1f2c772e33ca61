"""
Encryptor Configuration — validated, immutable cipher settings.

The two cipher modes compose differently with signing:

- ``CbcConfig`` (aes-cbc): unauthenticated on its own, so it always
  carries a fully configured ``MessageVerifier``.
- ``GcmConfig`` (aes-256-gcm): self-authenticating, so it has no
  verifier at all.

Configuration is complete once constructed; encryptors never fill in
defaults mid-operation.
"""
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from .exceptions import CipherError, ConfigurationError, SecretNotSet
from .serializers import Serializer, JSONSerializer, NullSerializer
from .verifier import MessageVerifier

CBC = "aes-cbc"
GCM = "aes-256-gcm"
DEFAULT_CIPHER = CBC  # Rails default before 5.2


class _CipherConfig(BaseModel):
    key: bytes
    serializer: Serializer = Field(default_factory=JSONSerializer)

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    @field_validator("key")
    @classmethod
    def validate_key(cls, v: bytes) -> bytes:
        """Reject an empty encryption key."""
        if not v:
            raise SecretNotSet("Encryption key not set")
        return v


class CbcConfig(_CipherConfig):
    """aes-cbc settings; the verifier signs every encrypted message."""

    cipher: Literal["aes-cbc"] = CBC
    verifier: MessageVerifier

    @model_validator(mode="before")
    @classmethod
    def default_verifier(cls, data: Any) -> Any:
        """Build a SHA-1 verifier from ``sign_key`` when none is given."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        sign_key = data.pop("sign_key", None)
        if data.get("verifier") is None:
            if not sign_key:
                raise ConfigurationError(
                    "Verifier and/or signature key not set"
                )
            data["verifier"] = MessageVerifier(
                sign_key, hasher="sha1", serializer=NullSerializer(),
            )
        return data

    @model_validator(mode="after")
    def validate_verifier(self) -> "CbcConfig":
        """Ensure the verifier can sign before any message is encrypted."""
        self.verifier.check_config()
        return self


class GcmConfig(_CipherConfig):
    """aes-256-gcm settings; messages are authenticated by the cipher."""

    cipher: Literal["aes-256-gcm"] = GCM

    @model_validator(mode="before")
    @classmethod
    def reject_verifier(cls, data: Any) -> Any:
        """aes-256-gcm messages are never wrapped by a verifier."""
        if isinstance(data, dict):
            if data.get("verifier") is not None or data.get("sign_key"):
                raise ConfigurationError(
                    f"{GCM} is self-authenticating and takes no verifier "
                    "or signature key"
                )
            data = {k: v for k, v in data.items() if k not in ("verifier", "sign_key")}
        return data


EncryptorConfig = Union[CbcConfig, GcmConfig]

_CONFIGS: dict[str, type] = {
    CBC: CbcConfig,
    GCM: GcmConfig,
}


def build_config(
    key: bytes,
    sign_key: Optional[bytes] = None,
    cipher: Optional[str] = None,
    verifier: Optional[MessageVerifier] = None,
    serializer: Optional[Serializer] = None,
) -> EncryptorConfig:
    """Validate encryptor arguments into a CbcConfig or GcmConfig.

    Raises:
        CipherError: If ``cipher`` is not supported.
        ConfigurationError: If the settings do not fit the cipher mode.
    """
    name = cipher or DEFAULT_CIPHER
    config_cls = _CONFIGS.get(name)
    if config_cls is None:
        raise CipherError(f"cipher not set or not supported: {cipher!r}")
    data: dict[str, Any] = {
        "key": key,
        "sign_key": sign_key,
        "verifier": verifier,
    }
    if serializer is not None:
        data["serializer"] = serializer
    return config_cls.model_validate(data)
