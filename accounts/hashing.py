from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

class SimpleHasher:
    def __init__(self):
        self._ph = PasswordHasher()

    def hash(self, password: str) -> str:
        """Create a secure hash for a new password."""
        return self._ph.hash(password)

    def verify(self, stored_hash: str, password: str) -> bool:
        """Check a password attempt against the stored hash."""
        try:
            return self._ph.verify(stored_hash, password)
        except (VerificationError, InvalidHashError):
            return False

    def needs_rehash(self, stored_hash: str) -> bool:
        """True when the hash was made with older argon2 parameters."""
        return self._ph.check_needs_rehash(stored_hash)
