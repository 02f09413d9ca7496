"""Binary <-> text encodings used whenever bytes cross a storage boundary."""

import base64
import binascii
import re

from .errors import InvalidEncoding
from .result import returns_result

_HEX_RE = re.compile(r"\A[0-9a-fA-F]*\Z")


def encode_hex(data: bytes) -> str:
    """Lowercase hex, two digits per byte, no separators or prefix."""
    return bytes(data).hex()


def _decode_hex(text: str) -> bytes:
    if not isinstance(text, str):
        raise InvalidEncoding("hex input must be text")
    if len(text) % 2:
        raise InvalidEncoding("hex input has odd length")
    # bytes.fromhex tolerates whitespace, which is not valid here
    if not _HEX_RE.match(text):
        raise InvalidEncoding("hex input contains non-hex characters")
    return bytes.fromhex(text)


@returns_result
def decode_hex(text: str) -> bytes:
    return _decode_hex(text)


def encode_base64(data: bytes) -> str:
    """Standard alphabet, padded."""
    return base64.b64encode(bytes(data)).decode("ascii")


def _decode_base64(text: str) -> bytes:
    if not isinstance(text, str):
        raise InvalidEncoding("base64 input must be text")
    try:
        return base64.b64decode(text.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise InvalidEncoding("malformed base64 input") from exc


@returns_result
def decode_base64(text: str) -> bytes:
    return _decode_base64(text)
