"""
Key wrapping: RSA-OAEP encryption of a file's raw AES key.

The wrapped key travels as lowercase hex.
"""

import logging

from .codec import _decode_hex, encode_hex
from .errors import InvalidEncoding, UnwrapFailed, WrapFailed
from .keys import PrivateKeyHandle, PublicKeyHandle
from .result import returns_result
from .symmetric import KEY_SIZE, SymmetricKey

logger = logging.getLogger(__name__)


def _wrap(key: SymmetricKey, public_key: PublicKeyHandle) -> str:
    if not isinstance(public_key, PublicKeyHandle):
        raise WrapFailed("wrapping requires an encrypt-only public key handle")
    raw = key.export_raw()
    if len(raw) > public_key.max_wrap_payload:
        raise WrapFailed(
            f"{len(raw)}-byte key exceeds the {public_key.max_wrap_payload}-byte "
            f"OAEP payload limit of an RSA-{public_key.key_size} key"
        )
    try:
        wrapped = public_key.encrypt(raw)
    except ValueError as exc:
        raise WrapFailed("RSA-OAEP wrap failed") from exc
    return encode_hex(wrapped)


@returns_result
def wrap(key: SymmetricKey, public_key: PublicKeyHandle) -> str:
    """Wrap *key* under *public_key*; returns hex text."""
    return _wrap(key, public_key)


def _unwrap(wrapped_text: str, private_key: PrivateKeyHandle) -> SymmetricKey:
    if not isinstance(private_key, PrivateKeyHandle):
        raise UnwrapFailed("unwrapping requires a decrypt-only private key handle")
    try:
        wrapped = _decode_hex(wrapped_text.strip() if isinstance(wrapped_text, str) else wrapped_text)
    except InvalidEncoding as exc:
        raise InvalidEncoding("wrapped key is not valid hex") from exc
    try:
        raw = private_key.decrypt(wrapped)
    except ValueError as exc:
        # Wrong key and corrupted ciphertext are indistinguishable here
        raise UnwrapFailed("could not unwrap the file key") from exc
    if len(raw) != KEY_SIZE:
        raise UnwrapFailed("could not unwrap the file key")
    return SymmetricKey(raw)


@returns_result
def unwrap(wrapped_text: str, private_key: PrivateKeyHandle) -> SymmetricKey:
    """Recover the AES key wrapped by :func:`wrap`."""
    return _unwrap(wrapped_text, private_key)
