"""Reservation lifecycle: create, list, look up, change status, delete."""

import logging
import math
from typing import Optional

from rental_booking.exceptions import (
    InvalidStatusError,
    ReservationConflictError,
    ReservationNotFoundError,
    ValidationError,
    VehicleNotFoundError,
)
from rental_booking.models.reservation import Reservation
from rental_booking.models.vehicle import Vehicle
from rental_booking.services.availability_service import AvailabilitySynchronizer
from rental_booking.services.common import resolve_store, vehicle_locks, to_float_safe, clean_str
from rental_booking.services.notification_service import NotificationSink, StoreNotificationSink
from rental_booking.services.overlap_checker import OverlapChecker
from rental_booking.utils.constants import (
    ALL_STATUSES,
    BLOCKING_STATUSES,
    NotificationType,
    ReservationStatus,
)
from rental_booking.utils.dates import parse_instant, fmt_iso_local, utcnow

logger = logging.getLogger(__name__)


def _check_status(status) -> str:
    value = clean_str(status).lower()
    if value not in ALL_STATUSES:
        raise InvalidStatusError(
            f"Error: status must be one of {', '.join(sorted(ALL_STATUSES))} (got {status!r})"
        )
    return value


def _id_or_empty(value) -> str:
    if value is None or isinstance(value, bool):
        return ""
    return clean_str(value) if isinstance(value, str) else str(value)


def _phone_or_none(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ValidationError("Phone must be text or digits.")
    return str(value).strip() or None


class ReservationService:
    """
    Entry points used by the transport layer.

    Every state change runs inside the vehicle's lock:
      check overlap -> write store -> resync availability
    Notifications are sent after the lock is released and never undo a write.
    """

    # tests can inject: ReservationService.sink = fake_sink
    sink: Optional[NotificationSink] = None

    # --------------- helpers ---------------
    @staticmethod
    def _resync(vehicle_id: str, st) -> Optional[bool]:
        """Best-effort resync after a committed write; a missing vehicle is logged, not raised."""
        try:
            return AvailabilitySynchronizer.sync(vehicle_id, store=st)
        except VehicleNotFoundError as e:
            logger.warning("Availability of vehicle %s left stale: %s", vehicle_id, e.message)
            return None

    @staticmethod
    def _notify(st, owner_id, event_type: str, message: str) -> None:
        sink = ReservationService.sink or StoreNotificationSink(st)
        try:
            sink.emit(owner_id, event_type, message)
        except Exception:
            logger.exception("Notification %r for owner %s was not delivered", event_type, owner_id)

    @staticmethod
    def _describe(st, r: Reservation, tz_name=None) -> str:
        v = st.get_vehicle(r.vehicle_id)
        label = Vehicle.from_dict(v).label if v else r.vehicle_id
        return (f"{label} from {fmt_iso_local(r.start, tz_name)} "
                f"to {fmt_iso_local(r.end, tz_name)}")

    # --------------- Commands ---------------
    @staticmethod
    def create_reservation(
            vehicle_id,
            owner_user_id=None,
            guest_name=None,
            guest_email=None,
            phone=None,
            start=None,
            end=None,
            total_price=None,
            status: str = ReservationStatus.PENDING,
            *,
            tz_name: Optional[str] = None,
            store=None,
    ) -> Reservation:
        """
        Validate and store a reservation for a registered user or a guest.

        Raises:
            ValidationError: missing fields, bad dates, start >= end, no owner, price <= 0
            InvalidStatusError: unknown initial status
            VehicleNotFoundError: unknown vehicle
            ReservationConflictError: interval overlaps a non-cancelled reservation
        """
        st = resolve_store(store)

        vid = _id_or_empty(vehicle_id)
        if not vid or start is None or end is None or total_price in (None, ""):
            raise ValidationError("Required: car, startDate, endDate, totalPrice.")

        owner = _id_or_empty(owner_user_id)
        name = clean_str(guest_name)
        email = clean_str(guest_email)
        if not owner and (not name or not email):
            raise ValidationError("Either user must be provided, or guest name/email.")
        if owner and (name or email):
            raise ValidationError("Provide either a user or guest name/email, not both.")

        d1 = parse_instant(start, tz_name, field="start date")
        d2 = parse_instant(end, tz_name, field="end date")
        if d1 >= d2:
            raise ValidationError("End date must be after start date.")

        price = to_float_safe(total_price)
        if price is None or not math.isfinite(price) or price <= 0:
            raise ValidationError("Total price must be a positive number.")

        status = _check_status(status)
        phone = _phone_or_none(phone)

        if st.get_vehicle(vid) is None:
            raise VehicleNotFoundError("Car does not exist.")

        with vehicle_locks.hold(vid):
            # the car may have been removed while we waited
            if st.get_vehicle(vid) is None:
                raise VehicleNotFoundError("Car does not exist.")
            if status in BLOCKING_STATUSES and OverlapChecker.has_conflict(vid, d1, d2, store=st):
                raise ReservationConflictError("Car already booked for those dates.")

            rid = st.create_reservation({
                "vehicle_id": vid,
                "owner_id": owner or None,
                "guest_name": None if owner else name,
                "guest_email": None if owner else email,
                "phone": phone,
                "start": d1,
                "end": d2,
                "total_price": round(price, 2),
                "status": status,
                "created_at": utcnow(),
            })
            reservation = Reservation.from_dict(st.get_reservation(rid))
            ReservationService._resync(vid, st)

        logger.info("Reservation %s created for vehicle %s (%s)", rid, vid, status)
        ReservationService._notify(
            st, reservation.owner_id, NotificationType.CREATED,
            f"New booking: {ReservationService._describe(st, reservation, tz_name)}",
        )
        return reservation

    @staticmethod
    def update_reservation_status(
            reservation_id, status, *, tz_name: Optional[str] = None, store=None,
    ) -> Reservation:
        """
        Administrative status override. Any of the four statuses may follow any other.
        Moving into a blocking status re-checks overlap, ignoring the reservation itself.

        Raises:
            InvalidStatusError, ReservationNotFoundError, ReservationConflictError
        """
        st = resolve_store(store)
        new_status = _check_status(status)

        current = st.get_reservation(reservation_id)
        if current is None:
            raise ReservationNotFoundError()
        vid = current["vehicle_id"]

        with vehicle_locks.hold(vid):
            current = st.get_reservation(reservation_id)
            if current is None:
                raise ReservationNotFoundError()
            previous = current.get("status")

            if new_status in BLOCKING_STATUSES and OverlapChecker.has_conflict(
                    vid, current["start"], current["end"],
                    exclude_reservation_id=current["reservation_id"], store=st):
                raise ReservationConflictError(
                    f"Error: cannot set status to {new_status}; dates overlap another booking"
                )

            updated = Reservation.from_dict(st.update_reservation_status(reservation_id, new_status))
            ReservationService._resync(vid, st)

        logger.info("Reservation %s status %s -> %s", updated.reservation_id, previous, new_status)
        if new_status == ReservationStatus.CANCELLED and previous != ReservationStatus.CANCELLED:
            ReservationService._notify(
                st, updated.owner_id, NotificationType.CANCELLED,
                f"Booking cancelled: {ReservationService._describe(st, updated, tz_name)}",
            )
        return updated

    @staticmethod
    def delete_reservation(reservation_id, *, tz_name: Optional[str] = None, store=None) -> Reservation:
        """Remove a reservation and resync its vehicle. Returns the deleted reservation."""
        st = resolve_store(store)
        current = st.get_reservation(reservation_id)
        if current is None:
            raise ReservationNotFoundError()
        vid = current["vehicle_id"]

        with vehicle_locks.hold(vid):
            removed = st.delete_reservation(reservation_id)
            if removed is None:
                raise ReservationNotFoundError()
            deleted = Reservation.from_dict(removed)
            ReservationService._resync(vid, st)

        logger.info("Reservation %s deleted (was %s)", deleted.reservation_id, deleted.status)
        ReservationService._notify(
            st, deleted.owner_id, NotificationType.DELETED,
            f"Booking removed: {ReservationService._describe(st, deleted, tz_name)}",
        )
        return deleted

    # --------------- Queries ---------------
    @staticmethod
    def get_reservation(reservation_id, *, store=None) -> Reservation:
        r = resolve_store(store).get_reservation(reservation_id)
        if r is None:
            raise ReservationNotFoundError()
        return Reservation.from_dict(r)

    @staticmethod
    def list_reservations(vehicle_id=None, owner_id=None, guest_email=None, *, store=None) -> list[Reservation]:
        """
        Filter by vehicle, owner and/or exact guest email; empty filters are ignored.
        Results are ordered by start time.
        """
        rows = resolve_store(store).find_reservations(
            vehicle_id=_id_or_empty(vehicle_id) or None,
            owner_id=_id_or_empty(owner_id) or None,
            guest_email=clean_str(guest_email) or None,
        )
        out = [Reservation.from_dict(r) for r in rows]
        out.sort(key=lambda r: (r.start, r.reservation_id))
        return out
