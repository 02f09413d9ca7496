"""
Tests for the seal/open protocols and the length-prefixed frame.
"""
import os
import random
import struct

import pytest

import zkcrypto
from zkcrypto import (
    GENERIC_ACCESS_MESSAGE,
    AccessDenied,
    ErrorKind,
    IntegrityMismatch,
    public_message,
)
from zkcrypto import codec, digest, envelope, keys, symmetric, wrapping


def _seal_raw_frame(frame: bytes, public_key_hex: str):
    """Encrypt an arbitrary frame the way seal does, bypassing framing."""
    public = keys.import_public(public_key_hex).unwrap()
    key = symmetric.generate_key().unwrap()
    blob = codec.encode_base64(symmetric.seal(frame, key).unwrap())
    return blob, wrapping.wrap(key, public).unwrap()


# ----------------------------------------------------------------------------
# Framing
# ----------------------------------------------------------------------------

def test_frame_layout():
    frame = envelope.build_frame("ab12", b"content")
    assert frame == b"\x00\x00\x00\x04" + b"ab12" + b"content"


def test_frame_reads_declared_length_not_64():
    frame = envelope.build_frame("short", b"\x00\x01payload")
    assert envelope.parse_frame(frame).unwrap() == ("short", b"\x00\x01payload")


def test_frame_empty_content():
    h = "f" * 64
    assert envelope.parse_frame(envelope.build_frame(h, b"")).unwrap() == (h, b"")


@pytest.mark.parametrize("frame", [
    b"",
    b"\x00\x00\x00",
    struct.pack(">I", 64) + b"a" * 63,
    struct.pack(">I", 0xFFFFFFFF) + b"abc",
])
def test_frame_shorter_than_declared(frame):
    assert envelope.parse_frame(frame).kind is ErrorKind.MALFORMED_FRAME


def test_frame_hash_not_utf8():
    frame = struct.pack(">I", 2) + b"\xff\xfe" + b"data"
    assert envelope.parse_frame(frame).kind is ErrorKind.MALFORMED_FRAME


# ----------------------------------------------------------------------------
# Seal / open
# ----------------------------------------------------------------------------

def test_hello_roundtrip(key_pair):
    payload = zkcrypto.seal(b"hello", key_pair.public_key).unwrap()
    content = zkcrypto.open(payload.encrypted_content, payload.encrypted_aes_key, key_pair.private_key).unwrap()
    assert content == b"hello"
    assert payload.file_hash == digest.hash_hex(content).unwrap()
    assert payload.file_hash == "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"


@pytest.mark.parametrize("size", [0, 1, 4096, 1_200_000])
def test_roundtrip_sizes(key_pair, size):
    data = os.urandom(size)
    payload = zkcrypto.seal(data, key_pair.public_key).unwrap()
    assert zkcrypto.open(payload.encrypted_content, payload.encrypted_aes_key, key_pair.private_key).unwrap() == data


def test_roundtrip_with_handles(key_pair):
    public = keys.import_public(key_pair.public_key).unwrap()
    private = keys.import_private(key_pair.private_key).unwrap()
    payload = zkcrypto.seal(b"handles", public).unwrap()
    assert zkcrypto.open(payload.encrypted_content, payload.encrypted_aes_key, private).unwrap() == b"handles"


def test_wire_encodings(key_pair):
    payload = zkcrypto.seal(b"abc", key_pair.public_key).unwrap()
    blob = codec.decode_base64(payload.encrypted_content).unwrap()
    # nonce + (4-byte prefix + 64-char hash + content) + tag
    assert len(blob) == 12 + 4 + 64 + 3 + 16
    assert codec.decode_hex(payload.encrypted_aes_key).is_ok()


def test_sealing_twice_differs_but_opens_the_same(key_pair):
    first = zkcrypto.seal(b"same content", key_pair.public_key).unwrap()
    second = zkcrypto.seal(b"same content", key_pair.public_key).unwrap()
    assert first.encrypted_content != second.encrypted_content
    assert first.encrypted_aes_key != second.encrypted_aes_key
    for p in (first, second):
        assert zkcrypto.open(p.encrypted_content, p.encrypted_aes_key, key_pair.private_key).unwrap() == b"same content"


def test_open_with_other_key_pair_fails(key_pair, other_key_pair):
    payload = zkcrypto.seal(b"not for you", key_pair.public_key).unwrap()
    result = zkcrypto.open(payload.encrypted_content, payload.encrypted_aes_key, other_key_pair.private_key)
    assert not result.is_ok()
    assert result.kind in (ErrorKind.UNWRAP_FAILED, ErrorKind.DECRYPTION_FAILED)
    assert result.public_message == GENERIC_ACCESS_MESSAGE


def test_single_bit_flips_are_detected(key_pair):
    payload = zkcrypto.seal(os.urandom(512), key_pair.public_key).unwrap()
    blob = codec.decode_base64(payload.encrypted_content).unwrap()
    rng = random.Random(1234)

    for _ in range(200):
        tampered = bytearray(blob)
        bit = rng.randrange(len(blob) * 8)
        tampered[bit // 8] ^= 1 << (bit % 8)
        result = zkcrypto.open(codec.encode_base64(bytes(tampered)), payload.encrypted_aes_key, key_pair.private_key)
        assert result.kind is ErrorKind.DECRYPTION_FAILED


def test_unwrap_failure_stops_before_decoding(other_key_pair, key_pair):
    """A bad key is reported even when the blob itself is garbage."""
    payload = zkcrypto.seal(b"x", key_pair.public_key).unwrap()
    result = zkcrypto.open("!!! not base64 !!!", payload.encrypted_aes_key, other_key_pair.private_key)
    assert result.kind is ErrorKind.UNWRAP_FAILED


def test_bad_base64_with_right_key(key_pair):
    payload = zkcrypto.seal(b"x", key_pair.public_key).unwrap()
    result = zkcrypto.open("!!! not base64 !!!", payload.encrypted_aes_key, key_pair.private_key)
    assert result.kind is ErrorKind.INVALID_ENCODING


def test_invalid_private_key_text(key_pair):
    payload = zkcrypto.seal(b"x", key_pair.public_key).unwrap()
    result = zkcrypto.open(payload.encrypted_content, payload.encrypted_aes_key, "not-hex!!")
    assert result.kind in (ErrorKind.INVALID_ENCODING, ErrorKind.INVALID_KEY_MATERIAL)


def test_invalid_public_key_text():
    assert zkcrypto.seal(b"x", "abcd").kind is ErrorKind.INVALID_KEY_MATERIAL


def test_integrity_mismatch_returns_no_content(key_pair):
    frame = envelope.build_frame(digest.hash_hex(b"original").unwrap(), b"substituted")
    blob, wrapped = _seal_raw_frame(frame, key_pair.public_key)

    result = zkcrypto.open(blob, wrapped, key_pair.private_key)
    assert result.kind is ErrorKind.INTEGRITY_MISMATCH
    assert result.unwrap_or(None) is None
    with pytest.raises(IntegrityMismatch):
        result.unwrap()


def test_malformed_frame_inside_valid_ciphertext(key_pair):
    blob, wrapped = _seal_raw_frame(struct.pack(">I", 64) + b"abc", key_pair.public_key)
    assert zkcrypto.open(blob, wrapped, key_pair.private_key).kind is ErrorKind.MALFORMED_FRAME


def test_top_level_hash_is_not_consulted(key_pair):
    """Only the embedded hash decides; the informational copy is ignored."""
    payload = zkcrypto.seal(b"data", key_pair.public_key).unwrap()
    assert payload.file_hash == digest.hash_hex(b"data").unwrap()
    assert zkcrypto.open(payload.encrypted_content, payload.encrypted_aes_key, key_pair.private_key).is_ok()


def test_access_failures_share_one_public_message():
    for kind in (ErrorKind.UNWRAP_FAILED, ErrorKind.DECRYPTION_FAILED, ErrorKind.INTEGRITY_MISMATCH):
        assert public_message(kind) == GENERIC_ACCESS_MESSAGE
    assert public_message(ErrorKind.INVALID_ENCODING) != GENERIC_ACCESS_MESSAGE
    assert issubclass(IntegrityMismatch, AccessDenied)
