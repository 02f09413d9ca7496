"""
Envelope: the seal (upload) and open (download) protocols.

Seal binds a file's SHA-256 to its content inside one AEAD-encrypted frame,
then wraps the per-file AES key under the recipient's RSA public key.

Frame layout (the plaintext handed to AES-GCM)::

    hash_len (4 bytes, big-endian) || hash (hash_len bytes, UTF-8 hex) || content

The length prefix is always written and always read back; readers must not
assume the hash is 64 characters.

Wire outputs:
    encrypted_content  base64 of nonce || ciphertext+tag
    encrypted_aes_key  hex of the RSA-OAEP wrapped AES key
    file_hash          informational copy of the hash, never trusted on open

Seal and open are stateless: every key is passed in and every buffer is
local to the call, so concurrent calls share nothing.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Tuple, Union

from . import codec, digest, keys, symmetric, wrapping
from .errors import IntegrityMismatch, MalformedFrame
from .keys import PrivateKeyHandle, PublicKeyHandle
from .result import Err, Ok, Result, returns_result

logger = logging.getLogger(__name__)

LENGTH_PREFIX = struct.Struct(">I")


@dataclass(frozen=True)
class SealedPayload:
    """Text outputs of :func:`seal`, ready for the record store."""

    encrypted_content: str
    encrypted_aes_key: str
    file_hash: str


# ============================================================================
# Framing
# ============================================================================

def build_frame(hash_text: str, content: bytes) -> bytes:
    hash_bytes = hash_text.encode("utf-8")
    return LENGTH_PREFIX.pack(len(hash_bytes)) + hash_bytes + bytes(content)


def _parse_frame(frame: bytes) -> Tuple[str, bytes]:
    if len(frame) < LENGTH_PREFIX.size:
        raise MalformedFrame("frame is shorter than its length prefix")
    (hash_len,) = LENGTH_PREFIX.unpack_from(frame, 0)
    end = LENGTH_PREFIX.size + hash_len
    if len(frame) < end:
        raise MalformedFrame(
            f"frame declares a {hash_len}-byte hash but holds only "
            f"{len(frame) - LENGTH_PREFIX.size} bytes after the prefix"
        )
    try:
        hash_text = bytes(frame[LENGTH_PREFIX.size:end]).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedFrame("hash field is not valid UTF-8") from exc
    return hash_text, bytes(frame[end:])


@returns_result
def parse_frame(frame: bytes) -> Tuple[str, bytes]:
    """Split a frame into ``(hash_text, content)``."""
    return _parse_frame(frame)


# ============================================================================
# Protocols
# ============================================================================

def _public_handle(recipient: Union[PublicKeyHandle, str]) -> Result:
    if isinstance(recipient, PublicKeyHandle):
        return Ok(recipient)
    return keys.import_public(recipient)


def _private_handle(recipient: Union[PrivateKeyHandle, str]) -> Result:
    if isinstance(recipient, PrivateKeyHandle):
        return Ok(recipient)
    return keys.import_private(recipient)


def seal(content: bytes, recipient_public: Union[PublicKeyHandle, str]) -> Result:
    """
    Encrypt *content* for the holder of *recipient_public*.

    Args:
        content: raw file bytes
        recipient_public: encrypt-only handle, or hex SPKI text

    Returns:
        Ok(SealedPayload) or the first Err produced by any step
    """
    public = _public_handle(recipient_public)
    if isinstance(public, Err):
        return public

    hashed = digest.hash_hex(content)
    if isinstance(hashed, Err):
        return hashed
    hash_text = hashed.value

    frame = build_frame(hash_text, content)

    key = symmetric.generate_key()
    if isinstance(key, Err):
        return key

    sealed = symmetric.seal(frame, key.value)
    if isinstance(sealed, Err):
        return sealed

    wrapped = wrapping.wrap(key.value, public.value)
    if isinstance(wrapped, Err):
        return wrapped

    logger.debug("Sealed %d bytes into %d-byte ciphertext", len(content), len(sealed.value))
    return Ok(SealedPayload(
        encrypted_content=codec.encode_base64(sealed.value),
        encrypted_aes_key=wrapped.value,
        file_hash=hash_text,
    ))


def open(
    encrypted_content: str,
    encrypted_aes_key: str,
    recipient_private: Union[PrivateKeyHandle, str],
) -> Result:
    """
    Decrypt and verify a payload produced by :func:`seal`.

    Steps run in a fixed order and stop at the first failure: unwrap the
    key, decode the blob, decrypt, unframe, recompute the hash. Content is
    returned only when the recomputed hash equals the embedded one.

    Args:
        encrypted_content: base64 ``nonce || ciphertext+tag``
        encrypted_aes_key: hex RSA-OAEP wrapped key
        recipient_private: decrypt-only handle, or hex PKCS#8 text

    Returns:
        Ok(content bytes) or the first Err
    """
    private = _private_handle(recipient_private)
    if isinstance(private, Err):
        return private

    key = wrapping.unwrap(encrypted_aes_key, private.value)
    if isinstance(key, Err):
        return key

    blob = codec.decode_base64(encrypted_content)
    if isinstance(blob, Err):
        return blob

    frame = symmetric.open(blob.value, key.value)
    if isinstance(frame, Err):
        return frame

    parsed = parse_frame(frame.value)
    if isinstance(parsed, Err):
        return parsed
    embedded_hash, content = parsed.value

    recomputed = digest.hash_hex(content)
    if isinstance(recomputed, Err):
        return recomputed
    if not digest.hashes_equal(recomputed.value, embedded_hash):
        return Err.from_exception(IntegrityMismatch("content hash does not match"))

    return Ok(content)
