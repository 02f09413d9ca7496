"""User accounts: the authentication provider for zkvault."""

from .hashing import SimpleHasher
from .manager import AccountManager
from .models import User
from .storage import IStorage, JSONStorage

__all__ = [
    "AccountManager",
    "SimpleHasher",
    "User",
    "IStorage",
    "JSONStorage",
]
