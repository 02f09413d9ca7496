"""
Error taxonomy for the zero-knowledge crypto core.

Every failure the core can report has an ``ErrorKind`` and a matching
exception class. Components raise these internally; the public functions
turn them into ``Err`` values (see ``result.py``).
"""

from enum import Enum


GENERIC_ACCESS_MESSAGE = "wrong key or corrupted data"


class ErrorKind(str, Enum):
    INVALID_ENCODING = "InvalidEncoding"
    INVALID_KEY_MATERIAL = "InvalidKeyMaterial"
    KEYGEN_FAILED = "KeygenFailed"
    PRIMITIVE_UNAVAILABLE = "PrimitiveUnavailable"
    WRAP_FAILED = "WrapFailed"
    UNWRAP_FAILED = "UnwrapFailed"
    DECRYPTION_FAILED = "DecryptionFailed"
    MALFORMED_FRAME = "MalformedFrame"
    INTEGRITY_MISMATCH = "IntegrityMismatch"


class VaultCryptoError(Exception):
    """Base exception for all crypto core errors."""

    kind: ErrorKind

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind.value)
        self.message = message or self.kind.value


class AccessDenied(VaultCryptoError):
    """
    Failures that must look identical to an untrusted user.

    A wrong private key, a tampered ciphertext and a hash mismatch are all
    shown as the same generic message.
    """


class InvalidEncoding(VaultCryptoError):
    kind = ErrorKind.INVALID_ENCODING


class InvalidKeyMaterial(VaultCryptoError):
    kind = ErrorKind.INVALID_KEY_MATERIAL


class KeygenFailed(VaultCryptoError):
    kind = ErrorKind.KEYGEN_FAILED


class PrimitiveUnavailable(VaultCryptoError):
    kind = ErrorKind.PRIMITIVE_UNAVAILABLE


class WrapFailed(VaultCryptoError):
    kind = ErrorKind.WRAP_FAILED


class UnwrapFailed(AccessDenied):
    kind = ErrorKind.UNWRAP_FAILED


class DecryptionFailed(AccessDenied):
    kind = ErrorKind.DECRYPTION_FAILED


class MalformedFrame(VaultCryptoError):
    kind = ErrorKind.MALFORMED_FRAME


class IntegrityMismatch(AccessDenied):
    kind = ErrorKind.INTEGRITY_MISMATCH


_EXCEPTIONS = {
    cls.kind: cls
    for cls in (
        InvalidEncoding,
        InvalidKeyMaterial,
        KeygenFailed,
        PrimitiveUnavailable,
        WrapFailed,
        UnwrapFailed,
        DecryptionFailed,
        MalformedFrame,
        IntegrityMismatch,
    )
}

_ACCESS_KINDS = frozenset(
    kind for kind, cls in _EXCEPTIONS.items() if issubclass(cls, AccessDenied)
)

_PUBLIC_MESSAGES = {
    ErrorKind.INVALID_ENCODING: "the data is not correctly encoded",
    ErrorKind.INVALID_KEY_MATERIAL: "the key is malformed or in the wrong format",
    ErrorKind.KEYGEN_FAILED: "key generation failed",
    ErrorKind.PRIMITIVE_UNAVAILABLE: "a required cryptographic primitive is unavailable",
    ErrorKind.WRAP_FAILED: "the file key could not be wrapped for this public key",
    ErrorKind.MALFORMED_FRAME: "the encrypted payload is malformed",
}


def exception_for(kind: ErrorKind) -> type:
    """Return the exception class raised for *kind*."""
    return _EXCEPTIONS[kind]


def is_access_failure(kind: ErrorKind) -> bool:
    return kind in _ACCESS_KINDS


def public_message(kind: ErrorKind) -> str:
    """
    User-facing text for an error kind.

    Unwrap, decryption and integrity failures all collapse to the same
    message so the caller cannot learn which stage rejected the input.
    """
    if is_access_failure(kind):
        return GENERIC_ACCESS_MESSAGE
    return _PUBLIC_MESSAGES[kind]
