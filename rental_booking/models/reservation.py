from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..utils.constants import ReservationStatus, LEGACY_OWNER_KEYS
from ..utils.dates import to_iso


def owner_from_legacy(d: dict) -> Optional[str]:
    """
    Return the canonical owner id of a stored/incoming record.
    Older records kept the owning user under one of LEGACY_OWNER_KEYS.
    """
    owner = d.get("owner_id")
    if owner:
        return str(owner)
    for key in LEGACY_OWNER_KEYS:
        if d.get(key):
            return str(d[key])
    return None


@dataclass
class Reservation:
    """
    A booking of one vehicle for the half-open interval [start, end).
    The Store keeps raw dicts; services hand out these objects.
    Exactly one of owner_id or (guest_name, guest_email) identifies who booked.
    """
    reservation_id: str
    vehicle_id: str
    start: datetime
    end: datetime
    total_price: float
    owner_id: Optional[str] = None
    guest_name: Optional[str] = None
    guest_email: Optional[str] = None
    phone: Optional[str] = None
    status: str = ReservationStatus.PENDING
    created_at: Optional[datetime] = field(default=None)

    @property
    def is_guest(self) -> bool:
        return self.owner_id is None

    @classmethod
    def from_dict(cls, d: dict) -> "Reservation":
        return cls(
            reservation_id=d["reservation_id"],
            vehicle_id=str(d["vehicle_id"]),
            start=d["start"],
            end=d["end"],
            total_price=float(d["total_price"]),
            owner_id=owner_from_legacy(d),
            guest_name=d.get("guest_name"),
            guest_email=d.get("guest_email"),
            phone=d.get("phone"),
            status=d.get("status") or ReservationStatus.PENDING,
            created_at=d.get("created_at"),
        )

    def to_json(self) -> dict:
        """Shape used by the JSON API (keeps the field names clients already use)."""
        return {
            "id": self.reservation_id,
            "car": self.vehicle_id,
            "user": self.owner_id,
            "name": self.guest_name,
            "email": self.guest_email,
            "phone": self.phone,
            "startDate": to_iso(self.start),
            "endDate": to_iso(self.end),
            "totalPrice": self.total_price,
            "status": self.status,
            "createdAt": to_iso(self.created_at),
        }
