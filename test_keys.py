"""
Tests for key pair generation, import and the capability-scoped handles.
"""
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
import pytest

from zkcrypto import ErrorKind, InvalidKeyMaterial, PrivateKeyHandle, PublicKeyHandle
from zkcrypto import keys


def test_generated_pair_is_hex_spki_and_pkcs8(key_pair):
    public_der = bytes.fromhex(key_pair.public_key)
    private_der = bytes.fromhex(key_pair.private_key)

    public_key = serialization.load_der_public_key(public_der)
    private_key = serialization.load_der_private_key(private_der, password=None)
    assert isinstance(public_key, rsa.RSAPublicKey)
    assert public_key.key_size == 2048
    assert private_key.public_key().public_numbers() == public_key.public_numbers()
    assert key_pair.public_key == key_pair.public_key.lower()


def test_key_pair_repr_hides_private_half(key_pair):
    assert key_pair.private_key not in repr(key_pair)


def test_generate_rejects_small_keys():
    result = keys.generate(1024)
    assert not result.is_ok()
    assert result.kind is ErrorKind.KEYGEN_FAILED


def test_import_roundtrip(key_pair):
    public = keys.import_public(key_pair.public_key).unwrap()
    private = keys.import_private(key_pair.private_key).unwrap()
    assert isinstance(public, PublicKeyHandle)
    assert isinstance(private, PrivateKeyHandle)
    assert keys.export_public(public) == key_pair.public_key
    assert public.max_wrap_payload == 256 - 2 * 32 - 2


def test_import_tolerates_surrounding_whitespace_and_uppercase(key_pair):
    pasted = "\n  " + key_pair.private_key.upper() + "  \n"
    assert keys.import_private(pasted).is_ok()


def test_import_public_not_hex():
    """Pasting garbage is reported, never raised."""
    result = keys.import_public("not-hex!!")
    assert not result.is_ok()
    assert result.kind in (ErrorKind.INVALID_ENCODING, ErrorKind.INVALID_KEY_MATERIAL)


@pytest.mark.parametrize("text", ["", "   ", "00" * 40])
def test_import_public_malformed(text):
    result = keys.import_public(text)
    assert result.kind is ErrorKind.INVALID_KEY_MATERIAL


def test_import_truncated_keys(key_pair):
    assert keys.import_public(key_pair.public_key[:-20]).kind is ErrorKind.INVALID_KEY_MATERIAL
    assert keys.import_private(key_pair.private_key[:200]).kind is ErrorKind.INVALID_KEY_MATERIAL


def test_import_swapped_roles_rejected(key_pair):
    """A private key is not accepted where a public key is expected, and vice versa."""
    assert keys.import_public(key_pair.private_key).kind is ErrorKind.INVALID_KEY_MATERIAL
    assert keys.import_private(key_pair.public_key).kind is ErrorKind.INVALID_KEY_MATERIAL


def test_import_rejects_non_rsa_and_small_rsa():
    ec_key = ec.generate_private_key(ec.SECP256R1())
    ec_spki = ec_key.public_key().public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    assert keys.import_public(ec_spki.hex()).kind is ErrorKind.INVALID_KEY_MATERIAL

    small = rsa.generate_private_key(public_exponent=65537, key_size=1024)
    small_spki = small.public_key().public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    assert keys.import_public(small_spki.hex()).kind is ErrorKind.INVALID_KEY_MATERIAL


def test_handles_are_capability_scoped(key_pair):
    public = keys.import_public(key_pair.public_key).unwrap()
    private = keys.import_private(key_pair.private_key).unwrap()
    assert not hasattr(public, "decrypt")
    assert not hasattr(private, "encrypt")
    assert not hasattr(private, "export")


def test_invalid_key_material_unwrap_raises():
    with pytest.raises(InvalidKeyMaterial):
        keys.import_private("00" * 40).unwrap()


def test_fingerprint(key_pair):
    fp = keys.fingerprint(key_pair.public_key).unwrap()
    assert len(fp) == 19
    assert fp.count("-") == 3
    assert fp == keys.fingerprint(key_pair.public_key.upper()).unwrap()


def test_import_rejects_pkcs1_containers(key_pair):
    public = serialization.load_der_public_key(bytes.fromhex(key_pair.public_key))
    private = serialization.load_der_private_key(bytes.fromhex(key_pair.private_key), password=None)
    pkcs1_public = public.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.PKCS1,
    )
    pkcs1_private = private.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )
    assert keys.import_public(pkcs1_public.hex()).kind is ErrorKind.INVALID_KEY_MATERIAL
    assert keys.import_private(pkcs1_private.hex()).kind is ErrorKind.INVALID_KEY_MATERIAL
