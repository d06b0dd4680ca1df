# rental_booking/utils/constants.py

"""
Global constants for reservation statuses, notification types and defaults.
These constants are imported by both models and services.
"""

import os

# Date format (used when only a calendar day is given)
DATE_FMT = "%Y-%m-%d"


class ReservationStatus:
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ALL_STATUSES = {
    ReservationStatus.PENDING,
    ReservationStatus.CONFIRMED,
    ReservationStatus.COMPLETED,
    ReservationStatus.CANCELLED,
}

# Statuses that occupy the vehicle's calendar (everything except cancelled)
BLOCKING_STATUSES = ALL_STATUSES - {ReservationStatus.CANCELLED}


class NotificationType:
    CREATED = "created"
    CANCELLED = "cancelled"
    DELETED = "deleted"


# Older records and clients used these names for the owning user
LEGACY_OWNER_KEYS = ("user", "user_id", "renter_id")

# --- Misc ---
ALLOWED_TYPES = {"car", "motorbike", "truck", "suv", "van"}
DEFAULT_TIMEZONE = os.getenv("RENTAL_TIMEZONE", "UTC")
NOTIFICATION_LIMIT = 25
