from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..utils.dates import to_iso


@dataclass
class Notification:
    """A lifecycle event addressed to a user (or to admins when owner_id is None)."""
    notification_id: str
    type: str
    message: str
    owner_id: Optional[str] = None
    seen: bool = False
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, d: dict) -> "Notification":
        return cls(
            notification_id=d["notification_id"],
            type=d["type"],
            message=d["message"],
            owner_id=d.get("owner_id"),
            seen=bool(d.get("seen")),
            created_at=d.get("created_at"),
        )

    def to_json(self) -> dict:
        return {
            "id": self.notification_id,
            "user": self.owner_id,
            "type": self.type,
            "message": self.message,
            "seen": self.seen,
            "createdAt": to_iso(self.created_at),
        }
