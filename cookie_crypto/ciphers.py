"""
Cipher codecs — AES-CBC and AES-GCM in the Rails wire format.

Each codec turns plaintext bytes into ``--``-joined base64 segments and
back:

- aes-cbc:      base64(ciphertext)--base64(iv)
- aes-256-gcm:  base64(ciphertext)--base64(nonce)--base64(auth_tag)

Rails keeps the GCM tag as a third segment instead of appending it to the
ciphertext, so it is split off after sealing and re-attached before
opening.

Security Note:
    IVs and nonces are drawn from os.urandom on every call.
    CBC output is unauthenticated and must be signed by the caller.
"""
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .exceptions import AuthenticationError, FormatError
from .padding import BLOCK_SIZE, pad, unpad
from .wire import b64decode, b64encode, join_segments, split_segments

MAX_KEY_LENGTH = 32  # AES-256
IV_SIZE = 16
NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16


def truncate_key(key: bytes) -> bytes:
    """Use only the first 32 bytes of longer keys, as Ruby's OpenSSL does."""
    return key[:MAX_KEY_LENGTH]


class AesCbcCodec:
    """AES in CBC mode with PKCS#7 padding."""

    name = "aes-cbc"

    def __init__(self, key: bytes):
        self._algorithm = algorithms.AES(truncate_key(key))

    def encrypt(self, plaintext: bytes) -> str:
        """Pad and encrypt under a fresh random IV.

        Returns:
            ``base64(ciphertext)--base64(iv)``.
        """
        iv = os.urandom(IV_SIZE)
        encryptor = Cipher(self._algorithm, modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(pad(plaintext)) + encryptor.finalize()
        return join_segments(b64encode(ciphertext), b64encode(iv))

    def decrypt(self, token: str) -> bytes:
        """Decrypt ``ciphertext--iv`` and strip the padding."""
        segments = split_segments(token, 2, "bad data (--)")
        ciphertext, iv = (b64decode(segment) for segment in segments)
        if len(ciphertext) < BLOCK_SIZE:
            raise FormatError("bad data, ciphertext too short")
        if len(ciphertext) % BLOCK_SIZE != 0:
            raise FormatError(
                "bad data, ciphertext is not a multiple of the block size"
            )
        if len(iv) != IV_SIZE:
            raise FormatError(f"bad data, iv must be {IV_SIZE} bytes")
        decryptor = Cipher(self._algorithm, modes.CBC(iv)).decryptor()
        plaintext = decryptor.update(ciphertext) + decryptor.finalize()
        return unpad(plaintext)


class AesGcmCodec:
    """AES in GCM mode; authenticates the ciphertext on its own."""

    name = "aes-256-gcm"

    def __init__(self, key: bytes):
        self._aesgcm = AESGCM(truncate_key(key))

    def encrypt(self, plaintext: bytes) -> str:
        """Seal under a fresh random nonce.

        Returns:
            ``base64(ciphertext)--base64(nonce)--base64(auth_tag)``.
        """
        nonce = os.urandom(NONCE_SIZE)
        sealed = self._aesgcm.encrypt(nonce, plaintext, None)
        ciphertext, tag = sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]
        return join_segments(
            b64encode(ciphertext), b64encode(nonce), b64encode(tag)
        )

    def decrypt(self, token: str) -> bytes:
        """Open ``ciphertext--nonce--tag``.

        Raises:
            AuthenticationError: wrong key or tampered data (not distinguished).
        """
        segments = split_segments(token, 3, "missing vectors, want 3")
        ciphertext, nonce, tag = (b64decode(segment) for segment in segments)
        if len(nonce) != NONCE_SIZE:
            raise FormatError(f"bad data, nonce must be {NONCE_SIZE} bytes")
        if len(tag) != TAG_SIZE:
            raise FormatError(f"bad data, auth tag must be {TAG_SIZE} bytes")
        try:
            return self._aesgcm.decrypt(nonce, ciphertext + tag, None)
        except InvalidTag as err:
            raise AuthenticationError("bad data") from err


CODECS: dict[str, type] = {
    AesCbcCodec.name: AesCbcCodec,
    AesGcmCodec.name: AesGcmCodec,
}
