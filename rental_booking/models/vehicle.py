from dataclasses import dataclass
from typing import Optional


@dataclass
class Vehicle:
    """
    Vehicle record as seen by the reservation engine.
    Only `is_available` is owned by the engine (kept in sync with confirmed
    reservations); the remaining fields are descriptive.
    """
    vehicle_id: str
    brand: str
    model: str
    type: str  # "car" | "motorbike" | "truck" | "suv" | "van"
    price_per_day: float
    is_available: bool = True
    image_url: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.brand} {self.model}".strip() or self.vehicle_id[:6]

    @classmethod
    def from_dict(cls, d: dict) -> "Vehicle":
        return cls(
            vehicle_id=str(d.get("vehicle_id") or d.get("id")),
            brand=d.get("brand") or "",
            model=d.get("model") or "",
            type=(d.get("type") or "car").lower(),
            price_per_day=float(d.get("price_per_day") or 0.0),
            is_available=bool(d.get("is_available", True)),
            image_url=d.get("image_url"),
        )

    def to_json(self) -> dict:
        return {
            "id": self.vehicle_id,
            "brand": self.brand,
            "model": self.model,
            "type": self.type,
            "pricePerDay": self.price_per_day,
            "isAvailable": self.is_available,
            "imageUrl": self.image_url or "",
        }
