"""
Block padding for the AES-CBC codec.

``pad`` is PKCS#7 over 16-byte blocks. ``unpad`` is lenient: it trusts the
trailing length byte and leaves the data alone when that byte is out of
range. Tokens are always signed before they reach ``unpad``.
"""
from cryptography.hazmat.primitives import padding as _padding

BLOCK_SIZE = 16  # AES block size in bytes


def pad(data: bytes) -> bytes:
    """Pad ``data`` to the next multiple of BLOCK_SIZE.

    Block-aligned input still gains a full block of padding.
    """
    padder = _padding.PKCS7(BLOCK_SIZE * 8).padder()
    return padder.update(data) + padder.finalize()


def unpad(data: bytes) -> bytes:
    """Strip padding as indicated by the last byte, if it is in range."""
    if not data:
        return data
    length = data[-1]
    if 1 <= length <= BLOCK_SIZE and length <= len(data):
        return data[:-length]
    return data
