"""Wire helpers: the ``--`` delimiter and strict standard base64."""
import base64
import binascii

from .exceptions import FormatError

SEPARATOR = "--"


def b64encode(data: bytes) -> str:
    """Standard, padded base64 as text."""
    return base64.b64encode(data).decode("ascii")


def b64decode(segment: str) -> bytes:
    """Decode a standard, padded base64 segment.

    Raises:
        FormatError: If the segment is not valid base64.
    """
    try:
        return base64.b64decode(segment, validate=True)
    except (binascii.Error, ValueError) as err:
        raise FormatError("bad base64 encoding") from err


def join_segments(*segments: str) -> str:
    """Join wire segments with ``--``."""
    return SEPARATOR.join(segments)


def split_segments(token: str, count: int, message: str = "bad data") -> list[str]:
    """Split a token on ``--`` and require exactly ``count`` segments."""
    segments = token.split(SEPARATOR)
    if len(segments) != count:
        raise FormatError(message)
    return segments
