"""Zero-knowledge envelope encryption for zkvault."""

from .errors import (
    GENERIC_ACCESS_MESSAGE,
    AccessDenied,
    DecryptionFailed,
    ErrorKind,
    IntegrityMismatch,
    InvalidEncoding,
    InvalidKeyMaterial,
    KeygenFailed,
    MalformedFrame,
    PrimitiveUnavailable,
    UnwrapFailed,
    VaultCryptoError,
    WrapFailed,
    public_message,
)
from .result import Err, Ok, Result
from .keys import KeyPair, PrivateKeyHandle, PublicKeyHandle
from .envelope import SealedPayload, seal, open

__all__ = [
    # Protocol
    "seal",
    "open",
    "SealedPayload",
    # Keys
    "KeyPair",
    "PublicKeyHandle",
    "PrivateKeyHandle",
    # Results
    "Ok",
    "Err",
    "Result",
    # Errors
    "ErrorKind",
    "VaultCryptoError",
    "AccessDenied",
    "InvalidEncoding",
    "InvalidKeyMaterial",
    "KeygenFailed",
    "PrimitiveUnavailable",
    "WrapFailed",
    "UnwrapFailed",
    "DecryptionFailed",
    "MalformedFrame",
    "IntegrityMismatch",
    "GENERIC_ACCESS_MESSAGE",
    "public_message",
]
