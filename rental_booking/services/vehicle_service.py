from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import List, Tuple, Optional

from rental_booking.exceptions import ValidationError, VehicleInUseError, VehicleNotFoundError
from rental_booking.models.vehicle import Vehicle
from rental_booking.services.availability_service import AvailabilitySynchronizer
from rental_booking.services.common import resolve_store, vehicle_locks, to_float_safe, clean_str
from rental_booking.utils.constants import ALLOWED_TYPES, BLOCKING_STATUSES

logger = logging.getLogger(__name__)


class VehicleService:
    """Vehicle repository operations: create, update, delete, look up, calendar, reconcile."""

    @staticmethod
    def create_vehicle(payload: dict, store=None) -> Vehicle:
        """
        Create a vehicle record into the given store (for testing)
        or the active store by default. New vehicles start available.
        """
        st = resolve_store(store)

        brand = clean_str(payload.get("brand"))
        model = clean_str(payload.get("model"))
        vtype = clean_str(payload.get("type")).lower()
        price = to_float_safe(payload.get("price_per_day"))

        if not brand or not model:
            raise ValidationError("Brand and model are required.")
        if vtype not in ALLOWED_TYPES:
            raise ValidationError(f"Vehicle type must be one of {', '.join(sorted(ALLOWED_TYPES))}.")
        if price is None or not math.isfinite(price) or price <= 0:
            raise ValidationError("Price per day must be a positive number.")

        vid = st.create_vehicle({
            "brand": brand,
            "model": model,
            "type": vtype,
            "price_per_day": price,
            "is_available": True,
            "image_url": clean_str(payload.get("image_url")),
        })
        logger.info("Vehicle %s created (%s %s)", vid, brand, model)
        return Vehicle.from_dict(st.get_vehicle(vid))

    @staticmethod
    def update_vehicle(vehicle_id, payload: dict, store=None) -> Vehicle:
        """
        Change any of brand, model, type, price_per_day, image_url.
        Keys that are absent or None are left alone. Availability is derived
        from bookings, so `is_available` is refused.
        """
        st = resolve_store(store)
        if payload.get("is_available") is not None:
            raise ValidationError("Availability is derived from bookings and cannot be set.")

        fields = {}
        for key in ("brand", "model"):
            if payload.get(key) is not None:
                fields[key] = clean_str(payload.get(key))
                if not fields[key]:
                    raise ValidationError("Brand and model are required.")
        if payload.get("type") is not None:
            fields["type"] = clean_str(payload.get("type")).lower()
            if fields["type"] not in ALLOWED_TYPES:
                raise ValidationError(f"Vehicle type must be one of {', '.join(sorted(ALLOWED_TYPES))}.")
        if payload.get("price_per_day") is not None:
            price = to_float_safe(payload.get("price_per_day"))
            if price is None or not math.isfinite(price) or price <= 0:
                raise ValidationError("Price per day must be a positive number.")
            fields["price_per_day"] = price
        if payload.get("image_url") is not None:
            fields["image_url"] = clean_str(payload.get("image_url"))

        v = st.update_vehicle(vehicle_id, fields)
        if v is None:
            raise VehicleNotFoundError(f"Error: vehicle with ID '{vehicle_id}' not found")
        logger.info("Vehicle %s updated (%s)", vehicle_id, ", ".join(sorted(fields)) or "no changes")
        return Vehicle.from_dict(v)

    @staticmethod
    def delete_vehicle(vehicle_id, store=None) -> Vehicle:
        """
        Delete a vehicle if and only if:
        - the vehicle exists,
        - no pending, confirmed or completed booking references it.
        Cancelled bookings stay in the store after the vehicle is gone.
        """
        st = resolve_store(store)
        with vehicle_locks.hold(vehicle_id):
            if st.get_vehicle(vehicle_id) is None:
                raise VehicleNotFoundError(f"Error: vehicle with ID '{vehicle_id}' not found")
            active = [
                r for r in st.find_reservations(vehicle_id=vehicle_id)
                if (r.get("status") or "") in BLOCKING_STATUSES
            ]
            if active:
                raise VehicleInUseError()
            removed = st.delete_vehicle(vehicle_id)
        logger.info("Vehicle %s deleted", vehicle_id)
        return Vehicle.from_dict(removed)

    @staticmethod
    def get_vehicle(vid, store=None) -> Vehicle:
        """Return a vehicle by ID or raise VehicleNotFoundError."""
        v = resolve_store(store).get_vehicle(vid)
        if v is None:
            raise VehicleNotFoundError(f"Error: vehicle with ID '{vid}' not found")
        return Vehicle.from_dict(v)

    @staticmethod
    def all_vehicles(available: Optional[bool] = None, store=None) -> List[Vehicle]:
        rows = [Vehicle.from_dict(v) for v in resolve_store(store).all_vehicles()]
        if available is not None:
            rows = [v for v in rows if v.is_available == available]
        rows.sort(key=lambda v: (v.brand.lower(), v.model.lower(), v.vehicle_id))
        return rows

    @staticmethod
    def availability_calendar(vehicle_id, store=None) -> List[Tuple[datetime, datetime]]:
        """
        Return (start, end) pairs of non-cancelled reservations, sorted by start.
        Used by clients to disable booked date ranges.
        """
        st = resolve_store(store)
        VehicleService.get_vehicle(vehicle_id, store=st)
        ranges = [
            (r["start"], r["end"])
            for r in st.find_reservations(vehicle_id=vehicle_id)
            if (r.get("status") or "") in BLOCKING_STATUSES
        ]
        ranges.sort(key=lambda t: t[0])
        return ranges

    @staticmethod
    def reconcile_availability(store=None) -> dict[str, bool]:
        """
        Rebuild every vehicle's availability flag from reservations.
        Repairs flags left stale by an earlier failed resync.
        """
        st = resolve_store(store)
        result = {}
        for v in st.all_vehicles():
            vid = v["vehicle_id"]
            try:
                result[vid] = AvailabilitySynchronizer.sync(vid, store=st)
            except VehicleNotFoundError:
                # deleted since the snapshot was taken
                continue
        logger.info("Reconciled availability for %d vehicles", len(result))
        return result
