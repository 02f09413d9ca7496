import logging
import re
from dataclasses import replace
from typing import Optional

from .hashing import SimpleHasher
from .models import User
from .storage import IStorage

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

class AccountManager:
    """
    Authentication provider.

    Yields a stable `user_id` that scopes the user's records. Accounts carry
    no key material: the public key lives in the key slot and the private
    key is never persisted.
    """

    def __init__(self, storage: IStorage, hasher: SimpleHasher):
        self.storage = storage
        self.hasher = hasher

    @staticmethod
    def _canon(email: str) -> str:
        return email.strip().lower()

    def register(self, email: str, password: str) -> User:
        email_c = self._canon(email)
        if not _EMAIL_RE.match(email_c):
            raise ValueError("Invalid email address.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
        if self.storage.get_user_by_email(email_c):
            raise ValueError("Email already registered.")
        user = User.new(email=email_c, pwd_hash=self.hasher.hash(password))
        self.storage.save_user(user)
        logger.info("Registered user %s", user.user_id)
        return user

    def authenticate(self, email: str, password: str) -> Optional[User]:
        user = self.storage.get_user_by_email(self._canon(email))
        if not user:
            return None
        if not self.hasher.verify(user.pwd_hash, password):
            logger.info("Failed login for user %s", user.user_id)
            return None
        if self.hasher.needs_rehash(user.pwd_hash):
            user = replace(user, pwd_hash=self.hasher.hash(password))
            self.storage.update_user(user)
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        return self.storage.get_user_by_id(user_id)
