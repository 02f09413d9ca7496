from __future__ import annotations

from dataclasses import dataclass, asdict, fields
from datetime import datetime, timezone
from typing import Any, Dict
import uuid


def _now_iso() -> str:
    """Consistent ISO-8601 timestamp (UTC, seconds precision)."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


@dataclass
class SealedFile:
    """
    One encrypted file as persisted by the record store.

    `encrypted_content` is base64 of nonce||AES-GCM ciphertext of the framed
    payload, and `encrypted_aes_key` is the hex RSA-OAEP wrapped file key.

    `file_hash` is an informational copy of the SHA-256 of the plaintext. The
    authoritative hash travels inside the encrypted frame; this copy is never
    used to accept or reject a download.
    """

    id: str
    user_id: str
    filename: str
    file_size: int
    encrypted_content: str
    encrypted_aes_key: str
    file_hash: str
    created_at: str
    updated_at: str

    @staticmethod
    def new(
        user_id: str,
        filename: str,
        file_size: int,
        *,
        encrypted_content: str,
        encrypted_aes_key: str,
        file_hash: str = "",
    ) -> "SealedFile":
        now = _now_iso()
        return SealedFile(
            id=str(uuid.uuid4()),
            user_id=user_id,
            filename=filename,
            file_size=file_size,
            encrypted_content=encrypted_content,
            encrypted_aes_key=encrypted_aes_key,
            file_hash=file_hash,
            created_at=now,
            updated_at=now,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SealedFile":
        """Build a record from a dict, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in known}
        filtered.setdefault("file_hash", "")
        filtered.setdefault("updated_at", filtered.get("created_at", ""))
        return cls(**filtered)
