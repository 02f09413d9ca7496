"""
Public key slot.

Each user has one slot that remembers the hex SPKI public key used for
uploads. Only public keys are accepted; there is no way to
store a private key here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional
import json
import logging
import os
import tempfile

from zkcrypto import keys

logger = logging.getLogger(__name__)


class PublicKeySlot:
    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as fh:
            return json.load(fh).get("public_keys", {})

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix="keys.", suffix=".tmp", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump({"public_keys": data}, fh, indent=2)
            os.replace(tmp, self.path)
        finally:
            if os.path.exists(tmp):
                os.remove(tmp)

    def store(self, user_id: str, public_key_hex: str) -> str:
        """
        Validate and remember `public_key_hex` for `user_id`.

        Raises the crypto core's InvalidEncoding / InvalidKeyMaterial if the
        text is not an RSA SPKI public key, so a pasted private key is
        rejected too.
        """
        handle = keys.import_public(public_key_hex).unwrap()
        normalized = handle.export()
        data = self._load()
        data[user_id] = normalized
        self._save(data)
        logger.info("Stored public key for user %s", user_id)
        return normalized

    def get(self, user_id: str) -> Optional[str]:
        return self._load().get(user_id)

    def remove(self, user_id: str) -> bool:
        data = self._load()
        if user_id not in data:
            return False
        del data[user_id]
        self._save(data)
        logger.info("Removed public key for user %s", user_id)
        return True

    def has(self, user_id: str) -> bool:
        return self.get(user_id) is not None
