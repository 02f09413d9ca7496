from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional
import json
import logging
import os
import tempfile

from .models import SealedFile

logger = logging.getLogger(__name__)


class RecordStore(ABC):
    """Holds opaque sealed-file records, scoped by owning user id."""

    @abstractmethod
    def insert(self, record: SealedFile) -> str: ...
    @abstractmethod
    def list(self, user_id: str) -> List[SealedFile]: ...
    @abstractmethod
    def get(self, user_id: str, record_id: str) -> Optional[SealedFile]: ...
    @abstractmethod
    def delete(self, user_id: str, record_id: str) -> bool: ...


def _canon_user_id(user_id: str) -> str:
    user_id = user_id.strip()
    if not user_id:
        raise ValueError("user id cannot be empty")
    if "/" in user_id or "\\" in user_id or user_id in (".", ".."):
        raise ValueError(f"invalid user id: {user_id!r}")
    return user_id


class JSONRecordStore(RecordStore):
    """
    One directory per user under `root`, each with an `index.json` listing
    that user's records. Writes go through a temp file and an atomic replace.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def _user_dir(self, user_id: str) -> Path:
        path = self.root / _canon_user_id(user_id)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _index_path(self, user_dir: Path) -> Path:
        return user_dir / "index.json"

    def _load(self, user_dir: Path) -> List[SealedFile]:
        path = self._index_path(user_dir)
        if not path.exists():
            return []
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        return [SealedFile.from_dict(item) for item in data.get("files", [])]

    def _save(self, user_dir: Path, entries: List[SealedFile]) -> None:
        path = self._index_path(user_dir)
        payload = {"files": [entry.to_dict() for entry in entries]}
        fd, tmp = tempfile.mkstemp(prefix="vault.", suffix=".json", dir=str(user_dir))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2)
            Path(tmp).replace(path)
        finally:
            Path(tmp).unlink(missing_ok=True)

    def insert(self, record: SealedFile) -> str:
        user_dir = self._user_dir(record.user_id)
        entries = self._load(user_dir)
        if any(e.id == record.id for e in entries):
            raise ValueError(f"record {record.id} already exists")
        entries.append(record)
        self._save(user_dir, entries)
        logger.info("Stored record %s for user %s", record.id, record.user_id)
        return record.id

    def list(self, user_id: str) -> List[SealedFile]:
        """All records of `user_id`, newest first; later inserts win ties."""
        entries = self._load(self._user_dir(user_id))
        ranked = sorted(enumerate(entries), key=lambda item: (item[1].created_at, item[0]), reverse=True)
        return [entry for _, entry in ranked]

    def get(self, user_id: str, record_id: str) -> Optional[SealedFile]:
        for entry in self._load(self._user_dir(user_id)):
            if entry.id == record_id:
                return entry
        return None

    def delete(self, user_id: str, record_id: str) -> bool:
        user_dir = self._user_dir(user_id)
        entries = self._load(user_dir)
        remaining = [e for e in entries if e.id != record_id]
        if len(remaining) == len(entries):
            return False
        self._save(user_dir, remaining)
        logger.info("Deleted record %s for user %s", record_id, user_id)
        return True
