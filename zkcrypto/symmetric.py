"""
AES-256-GCM per-file cipher.

Output layout of ``seal``::

    nonce (12 bytes) || ciphertext || GCM tag (16 bytes)

A new random nonce is drawn for every call.
"""

import os

from cryptography.exceptions import InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import DecryptionFailed, KeygenFailed, PrimitiveUnavailable
from .result import returns_result

KEY_SIZE = 32
NONCE_SIZE = 12
TAG_SIZE = 16


class SymmetricKey:
    """Opaque single-file AES-256 key."""

    __slots__ = ("_raw",)

    def __init__(self, raw: bytes):
        if len(raw) != KEY_SIZE:
            raise ValueError(f"AES-256 key must be {KEY_SIZE} bytes")
        self._raw = bytes(raw)

    def export_raw(self) -> bytes:
        return self._raw

    def _aead(self) -> AESGCM:
        try:
            return AESGCM(self._raw)
        except UnsupportedAlgorithm as exc:
            raise PrimitiveUnavailable("AES-GCM is not available from the backend") from exc

    def __repr__(self) -> str:
        return "<SymmetricKey aes-256-gcm>"


def _generate_key() -> SymmetricKey:
    try:
        return SymmetricKey(AESGCM.generate_key(bit_length=KEY_SIZE * 8))
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise KeygenFailed("AES key generation failed") from exc


@returns_result
def generate_key() -> SymmetricKey:
    return _generate_key()


def _seal(plaintext: bytes, key: SymmetricKey) -> bytes:
    nonce = os.urandom(NONCE_SIZE)
    return nonce + key._aead().encrypt(nonce, bytes(plaintext), None)


@returns_result
def seal(plaintext: bytes, key: SymmetricKey) -> bytes:
    """Encrypt *plaintext*, returning ``nonce || ciphertext+tag``."""
    return _seal(plaintext, key)


def _open(data: bytes, key: SymmetricKey) -> bytes:
    # Same message for short input, bad tag and wrong key
    if len(data) < NONCE_SIZE + TAG_SIZE:
        raise DecryptionFailed("decryption failed")
    nonce, ct = bytes(data[:NONCE_SIZE]), bytes(data[NONCE_SIZE:])
    try:
        return key._aead().decrypt(nonce, ct, None)
    except InvalidTag as exc:
        raise DecryptionFailed("decryption failed") from exc


@returns_result
def open(data: bytes, key: SymmetricKey) -> bytes:
    """Authenticate and decrypt a blob produced by :func:`seal`."""
    return _open(data, key)
