"""Keeps each vehicle's availability flag derived from its reservations."""

import logging

from rental_booking.exceptions import VehicleNotFoundError
from rental_booking.services.common import resolve_store, vehicle_locks
from rental_booking.utils.constants import ReservationStatus

logger = logging.getLogger(__name__)


class AvailabilitySynchronizer:
    """
    A vehicle is available iff none of its reservations is confirmed.
    The flag is not scoped to today's date: a confirmed booking next month
    already marks the vehicle unavailable.
    """

    @staticmethod
    def compute(vehicle_id, *, store=None) -> bool:
        """Availability implied by the current reservation set (no write)."""
        st = resolve_store(store)
        return not any(
            r.get("status") == ReservationStatus.CONFIRMED
            for r in st.find_reservations(vehicle_id=vehicle_id)
        )

    @staticmethod
    def sync(vehicle_id, *, store=None) -> bool:
        """
        Recompute and persist the availability flag; return the new value.
        Runs under the vehicle's lock, so when called from inside a reservation
        mutation it sees the post-mutation state and cannot interleave with
        another mutation of the same vehicle. Idempotent.

        Raises:
            VehicleNotFoundError: the vehicle record no longer exists.
        """
        st = resolve_store(store)
        with vehicle_locks.hold(vehicle_id):
            available = AvailabilitySynchronizer.compute(vehicle_id, store=st)
            if not st.set_vehicle_availability(vehicle_id, available):
                raise VehicleNotFoundError(f"Error: vehicle with ID '{vehicle_id}' not found")
        logger.debug("Vehicle %s availability -> %s", vehicle_id, available)
        return available
