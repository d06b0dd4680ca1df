"""Shared service helpers and factories."""

from datetime import datetime
from typing import Optional

from rental_booking.models.store import Store
from rental_booking.utils.locks import KeyedLock

# Serializes check-then-write and write-then-resync per vehicle
vehicle_locks = KeyedLock()


def _store() -> Store:
    """Get the singleton store instance."""
    return Store.instance()


def resolve_store(store=None):
    """Prefer an injected store (tests), otherwise the singleton."""
    return store if store is not None else _store()


# -------- date & math helpers --------
def overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """
    Check overlap between [a_start, a_end) and [b_start, b_end).
    End is exclusive: a booking ending at 10:00 does not clash with one starting at 10:00.
    Overlap rule: a_start < b_end and b_start < a_end
    """
    return a_start < b_end and b_start < a_end


def to_float_safe(value) -> Optional[float]:
    """Safely convert to float; return None if invalid."""
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def clean_str(value) -> str:
    """Trimmed string, '' for None or non-strings."""
    return value.strip() if isinstance(value, str) else ""
