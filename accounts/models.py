from dataclasses import dataclass
from datetime import datetime, timezone
import uuid

@dataclass(frozen=True)
class User:
    # stable id used to scope stored records
    user_id: str
    email: str   # canonical (stripped, lowercased)
    pwd_hash: str
    created_at: str   # ISO8601 "YYYY-MM-DDTHH:MM:SSZ"

    @staticmethod
    def new(email: str, pwd_hash: str) -> "User":
        now = datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")

        return User(
            user_id=str(uuid.uuid4()),
            email=email.strip().lower(),
            pwd_hash=pwd_hash,
            created_at=now,
        )
