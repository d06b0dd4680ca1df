"""Interval overlap detection against a vehicle's existing reservations."""

from rental_booking.services.common import resolve_store, overlap
from rental_booking.utils.constants import BLOCKING_STATUSES


class OverlapChecker:
    """Read-only conflict check; callers decide how to reject."""

    @staticmethod
    def conflicting(vehicle_id, start, end, exclude_reservation_id=None, *, store=None):
        """Return the blocking reservation dicts whose [start, end) intersects the candidate."""
        st = resolve_store(store)
        exclude = str(exclude_reservation_id) if exclude_reservation_id is not None else None
        hits = []
        for r in st.find_reservations(vehicle_id=vehicle_id):
            if exclude is not None and r.get("reservation_id") == exclude:
                continue
            if (r.get("status") or "") not in BLOCKING_STATUSES:
                continue
            if overlap(start, end, r["start"], r["end"]):
                hits.append(r)
        return hits

    @staticmethod
    def has_conflict(vehicle_id, start, end, exclude_reservation_id=None, *, store=None) -> bool:
        """
        True when [start, end) intersects any non-cancelled reservation of the vehicle.
        Adjacent intervals (one ends exactly when the other starts) do not conflict.
        """
        return bool(OverlapChecker.conflicting(
            vehicle_id, start, end, exclude_reservation_id, store=store,
        ))
