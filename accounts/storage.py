from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, List
from dataclasses import asdict, fields
from .models import User
import json, os, tempfile

# Get valid field names from User dataclass
_USER_FIELDS = {f.name for f in fields(User)}

def _make_user(data: Dict[str, Any]) -> User:
    """Create a User from dict, filtering out unknown fields."""
    filtered = {k: v for k, v in data.items() if k in _USER_FIELDS}
    return User(**filtered)

class IStorage(ABC):
    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]: ...
    @abstractmethod
    def get_user_by_id(self, user_id: str) -> Optional[User]: ...
    @abstractmethod
    def save_user(self, user: User) -> None: ...
    @abstractmethod
    def update_user(self, user: User) -> None: ...

class JSONStorage(IStorage):
    def __init__(self, path: str = "users.json"):
        self.path = str(path)
        parent = os.path.dirname(self.path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        if not os.path.exists(self.path):
            self._save({"users": []})

    def _load(self) -> Dict[str, Any]:
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _save(self, data: Dict[str, Any]) -> None:
        # atomic-ish write to avoid corruption
        fd, tmp = tempfile.mkstemp(prefix="users.", suffix=".tmp", dir=os.path.dirname(self.path) or ".")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, self.path)
        finally:
            if os.path.exists(tmp):
                os.remove(tmp)

    def get_user_by_email(self, email: str) -> Optional[User]:
        for u in self._load()["users"]:
            if u["email"] == email:
                return _make_user(u)
        return None

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        for u in self._load()["users"]:
            if u["user_id"] == user_id:
                return _make_user(u)
        return None

    def save_user(self, user: User) -> None:
        data = self._load()
        if any(u["email"] == user.email for u in data["users"]):
            raise ValueError("email already registered")
        data["users"].append(asdict(user))
        self._save(data)

    def update_user(self, user: User) -> None:
        data = self._load()
        for i, u in enumerate(data["users"]):
            if u["user_id"] == user.user_id:
                data["users"][i] = asdict(user)
                self._save(data)
                return
        raise ValueError("unknown user")
