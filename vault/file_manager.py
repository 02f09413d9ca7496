from pathlib import Path
from typing import List, Optional
import logging
import os
import tempfile

import zkcrypto
from zkcrypto import VaultCryptoError, public_message

from .models import SealedFile
from .store import RecordStore

logger = logging.getLogger(__name__)

# AES-GCM in the backend refuses plaintexts of 2**31 bytes or more
MAX_UPLOAD_SIZE = 2 ** 31 - 1

SORT_FIELDS = ("date", "name", "size")


# ============================================================================
# Helper methods
# ============================================================================

def _ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def _default_download_dir(user_id: str) -> Path:
    return Path.home() / "Downloads" / user_id


def _safe_filename(filename: str) -> str:
    name = Path(filename.replace("\\", "/")).name
    if name in ("", ".", ".."):
        raise ValueError(f"unusable filename: {filename!r}")
    return name


def _free_path(target_dir: Path, filename: str) -> Path:
    """`target_dir/filename`, or `name (1).ext`, `name (2).ext`... if taken."""
    candidate = target_dir / filename
    stem, suffix = candidate.stem, candidate.suffix
    n = 1
    while candidate.exists():
        candidate = target_dir / f"{stem} ({n}){suffix}"
        n += 1
    return candidate


def _write_atomic(path: Path, data: bytes) -> None:
    fd, tmp = tempfile.mkstemp(prefix=".download.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        Path(tmp).replace(path)
    finally:
        Path(tmp).unlink(missing_ok=True)


def describe_failure(exc: BaseException) -> str:
    """
    One-line message for showing a failure to the user.

    Unwrap, decryption and integrity failures all read
    "wrong key or corrupted data" so the user never learns which stage failed.
    """
    if isinstance(exc, VaultCryptoError):
        return public_message(exc.kind)
    return str(exc) or exc.__class__.__name__


# ============================================================================
# Public operations
# ============================================================================

def list_files(
    user_id: str,
    *,
    store: RecordStore,
    search: Optional[str] = None,
    sort_by: str = "date",
    descending: bool = True,
) -> List[SealedFile]:
    """
    List a user's files, newest first by default.

    Args:
        user_id: Owning user's stable id
        store: Record store to read from
        search: Case-insensitive substring the filename must contain
        sort_by: One of "date", "name" or "size"
        descending: Largest / newest / last-in-alphabet first

    Raises:
        ValueError: unknown sort_by
    """
    if sort_by not in SORT_FIELDS:
        raise ValueError(f"sort_by must be one of {', '.join(SORT_FIELDS)}")

    files = store.list(user_id)
    needle = (search or "").strip().lower()
    if needle:
        files = [f for f in files if needle in f.filename.lower()]

    if sort_by == "date":
        # store order is already newest first, ties included
        return files if descending else files[::-1]
    if sort_by == "name":
        return sorted(files, key=lambda f: f.filename.lower(), reverse=descending)
    return sorted(files, key=lambda f: f.file_size, reverse=descending)


def upload_file(
    user_id: str,
    filepath: str,
    public_key_hex: str,
    *,
    store: RecordStore,
) -> SealedFile:
    """
    Seal a local file under the user's public key and store the record.

    Args:
        user_id: Owning user's stable id
        filepath: Path to the file to upload
        public_key_hex: Recipient public key (hex SPKI)
        store: Record store to insert into

    Returns:
        The stored SealedFile record

    Raises:
        FileNotFoundError: filepath is not a file
        ValueError: no public key, or the file is larger than MAX_UPLOAD_SIZE
        VaultCryptoError: any failure from the seal protocol
    """
    src = Path(filepath).expanduser()
    if not src.is_file():
        raise FileNotFoundError(f"{filepath} is not a file")
    if not public_key_hex:
        raise ValueError("a public key is required to upload")
    if src.stat().st_size > MAX_UPLOAD_SIZE:
        raise ValueError(f"{src.name} is too large to upload (limit {MAX_UPLOAD_SIZE} bytes)")

    content = src.read_bytes()
    payload = zkcrypto.seal(content, public_key_hex).unwrap()

    entry = SealedFile.new(
        user_id=user_id,
        filename=src.name,
        file_size=len(content),
        encrypted_content=payload.encrypted_content,
        encrypted_aes_key=payload.encrypted_aes_key,
        file_hash=payload.file_hash,
    )
    store.insert(entry)
    logger.info("Uploaded %s (%d bytes) as %s", entry.filename, entry.file_size, entry.id)
    return entry


def download_file(
    user_id: str,
    file_id: str,
    private_key_hex: str,
    dest_dir: Optional[str] = None,
    *,
    store: RecordStore,
) -> Path:
    """
    Open a stored record with the user's private key and write the plaintext.

    The private key is only used for this call and is never stored. Nothing
    is written unless the whole open protocol succeeds. An existing file of
    the same name is left alone; the plaintext goes to `name (1).ext` etc.

    Returns:
        Path of the written file
    """
    if not file_id:
        raise ValueError("file id cannot be empty")

    entry = store.get(user_id, file_id)
    if not entry:
        raise FileNotFoundError(f"No file with id '{file_id}' for this user")

    result = zkcrypto.open(entry.encrypted_content, entry.encrypted_aes_key, private_key_hex)
    if not result.is_ok():
        logger.warning("Open failed for %s: %s", entry.id, result.kind.value)
        result.unwrap()
    plaintext = result.value

    target_dir = _ensure_dir(Path(dest_dir).expanduser() if dest_dir else _default_download_dir(user_id))
    target_path = _free_path(target_dir, _safe_filename(entry.filename))
    _write_atomic(target_path, plaintext)
    logger.info("Downloaded %s to %s", entry.id, target_path)
    return target_path


def delete_file(user_id: str, file_id: str, *, store: RecordStore) -> bool:
    """Delete a record. Irreversible; returns False if it did not exist."""
    return store.delete(user_id, file_id)
