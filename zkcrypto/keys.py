"""
RSA Key Pair Provider

Generates RSA-OAEP key pairs and imports them back from their hex text
form:
- public key: hex of the DER SubjectPublicKeyInfo (SPKI) structure
- private key: hex of the unencrypted DER PKCS#8 structure

Imported keys are wrapped in capability-scoped handles. A public handle can
only encrypt and a private handle can only decrypt, so a key the caller
believes is public can never be used for a private-key operation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .codec import _decode_hex, encode_hex
from .digest import DIGEST_SIZE, _hash_hex
from .errors import InvalidEncoding, InvalidKeyMaterial, KeygenFailed
from .result import returns_result

logger = logging.getLogger(__name__)

PUBLIC_EXPONENT = 65537
DEFAULT_KEY_SIZE = 2048
MIN_KEY_SIZE = 2048


def oaep_padding() -> padding.OAEP:
    """RSA-OAEP with SHA-256 for both the hash and MGF1, no label."""
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


@dataclass(frozen=True)
class KeyPair:
    """
    A freshly generated key pair, exported as two independent hex strings.

    The private half lives only in caller memory; nothing in this package
    persists it.
    """

    public_key: str
    private_key: str = field(repr=False)


class PublicKeyHandle:
    """Encrypt-only handle around an imported RSA public key."""

    __slots__ = ("_key",)

    def __init__(self, key: rsa.RSAPublicKey):
        self._key = key

    @property
    def key_size(self) -> int:
        return self._key.key_size

    @property
    def max_wrap_payload(self) -> int:
        """Largest plaintext OAEP-SHA256 can carry under this modulus."""
        return (self._key.key_size + 7) // 8 - 2 * DIGEST_SIZE - 2

    def encrypt(self, data: bytes) -> bytes:
        return self._key.encrypt(data, oaep_padding())

    def export(self) -> str:
        der = self._key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        return encode_hex(der)

    def __repr__(self) -> str:
        return f"<PublicKeyHandle rsa-{self.key_size} encrypt-only>"


class PrivateKeyHandle:
    """Decrypt-only handle around an imported RSA private key."""

    __slots__ = ("_key",)

    def __init__(self, key: rsa.RSAPrivateKey):
        self._key = key

    @property
    def key_size(self) -> int:
        return self._key.key_size

    def decrypt(self, data: bytes) -> bytes:
        return self._key.decrypt(data, oaep_padding())

    def __repr__(self) -> str:
        return f"<PrivateKeyHandle rsa-{self.key_size} decrypt-only>"


# ============================================================================
# Generation
# ============================================================================

@returns_result
def generate(key_size: int = DEFAULT_KEY_SIZE) -> KeyPair:
    """
    Generate a new RSA key pair for OAEP-SHA256 wrapping.

    Args:
        key_size: modulus size in bits, at least 2048

    Returns:
        KeyPair with hex SPKI public key and hex PKCS#8 private key
    """
    if key_size < MIN_KEY_SIZE:
        raise KeygenFailed(f"RSA key size must be at least {MIN_KEY_SIZE} bits")
    try:
        private_key = rsa.generate_private_key(
            public_exponent=PUBLIC_EXPONENT,
            key_size=key_size,
        )
        private_der = private_key.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise KeygenFailed("RSA key generation failed") from exc

    logger.info("Generated RSA-%d key pair", key_size)
    return KeyPair(
        public_key=PublicKeyHandle(private_key.public_key()).export(),
        private_key=encode_hex(private_der),
    )


# ============================================================================
# Import
# ============================================================================

def _key_bytes(text: str, role: str) -> bytes:
    if not isinstance(text, str):
        raise InvalidKeyMaterial(f"{role} key must be hex text")
    text = text.strip()
    if not text:
        raise InvalidKeyMaterial(f"{role} key is empty")
    try:
        return _decode_hex(text)
    except InvalidEncoding as exc:
        raise InvalidEncoding(f"{role} key is not valid hex") from exc


def _check_size(key_size: int, role: str) -> None:
    if key_size < MIN_KEY_SIZE:
        raise InvalidKeyMaterial(
            f"{role} key is {key_size} bits; at least {MIN_KEY_SIZE} are required"
        )


def _import_public(text: str) -> PublicKeyHandle:
    der = _key_bytes(text, "public")
    try:
        key = serialization.load_der_public_key(der)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise InvalidKeyMaterial("public key is not a valid SPKI structure") from exc
    if not isinstance(key, rsa.RSAPublicKey):
        raise InvalidKeyMaterial("public key is not an RSA key")
    # load_der_public_key also takes bare PKCS#1; only SPKI round-trips
    spki = key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    if spki != der:
        raise InvalidKeyMaterial("public key is not a valid SPKI structure")
    _check_size(key.key_size, "public")
    return PublicKeyHandle(key)


def _import_private(text: str) -> PrivateKeyHandle:
    der = _key_bytes(text, "private")
    try:
        key = serialization.load_der_private_key(der, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise InvalidKeyMaterial("private key is not a valid PKCS#8 structure") from exc
    if not isinstance(key, rsa.RSAPrivateKey):
        raise InvalidKeyMaterial("private key is not an RSA key")
    pkcs8 = key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    if pkcs8 != der:
        raise InvalidKeyMaterial("private key is not a valid PKCS#8 structure")
    _check_size(key.key_size, "private")
    return PrivateKeyHandle(key)


@returns_result
def import_public(text: str) -> PublicKeyHandle:
    """Parse a hex SPKI public key into an encrypt-only handle."""
    return _import_public(text)


@returns_result
def import_private(text: str) -> PrivateKeyHandle:
    """Parse a hex PKCS#8 private key into a decrypt-only handle."""
    return _import_private(text)


def export_public(handle: PublicKeyHandle) -> str:
    return handle.export()


@returns_result
def fingerprint(public_key_text: str) -> str:
    """Short SHA-256 fingerprint of a public key, e.g. ``3f2a-91c0-...``."""
    handle = _import_public(public_key_text)
    digest = _hash_hex(_decode_hex(handle.export()))[:16]
    return "-".join(digest[i:i + 4] for i in range(0, len(digest), 4))
