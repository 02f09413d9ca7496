"""SHA-256 content hashing for end-to-end integrity checks."""

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import constant_time
from cryptography.hazmat.primitives.hashes import Hash, SHA256

from .codec import encode_hex
from .errors import PrimitiveUnavailable
from .result import returns_result

DIGEST_SIZE = 32


def _sha256(data: bytes) -> bytes:
    try:
        digest = Hash(SHA256())
    except UnsupportedAlgorithm as exc:
        raise PrimitiveUnavailable("SHA-256 is not available from the backend") from exc
    digest.update(bytes(data))
    return digest.finalize()


def _hash_hex(data: bytes) -> str:
    return encode_hex(_sha256(data))


@returns_result
def hash_hex(data: bytes) -> str:
    """Compute the SHA-256 of *data* as 64 lowercase hex characters."""
    return _hash_hex(data)


def hashes_equal(a: str, b: str) -> bool:
    """Constant-time comparison of two hash strings."""
    return constant_time.bytes_eq(a.encode("utf-8"), b.encode("utf-8"))
