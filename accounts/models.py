# accounts/models.py

import time
from dataclasses import asdict, dataclass
from typing import Optional


@dataclass
class AuthSession:
    """
    Minimal session record for the signed-in visitor.
    Users, passwords and tokens are owned by Supabase Auth; we only keep
    what the backend handed us after signin.
    """
    user_id: str
    email: str
    access_token: str
    refresh_token: str
    expires_at: Optional[int] = None  # epoch seconds
    name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.email

    def is_expired(self, now: Optional[float] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now if now is not None else time.time()) >= self.expires_at

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data) -> Optional["AuthSession"]:
        if not isinstance(data, dict):
            return None
        try:
            return cls(
                user_id=str(data["user_id"]),
                email=data.get("email") or "",
                access_token=data["access_token"],
                refresh_token=data["refresh_token"],
                expires_at=data.get("expires_at"),
                name=data.get("name"),
            )
        except KeyError:
            return None

    def public_user(self) -> dict:
        """User fields safe to expose to the browser."""
        return {"name": self.name, "email": self.email}
