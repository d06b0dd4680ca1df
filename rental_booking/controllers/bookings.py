from flask import Blueprint, current_app, jsonify, request

from ..services.reservation_service import ReservationService
from ..utils.constants import ReservationStatus
from ..utils.decorators import json_body, pick

bp = Blueprint("bookings", __name__, url_prefix="/api/bookings")


@bp.post("")
@json_body
def create_booking(body):
    """Create a booking for a registered user (`user`) or a guest (`name` + `email`)."""
    reservation = ReservationService.create_reservation(
        vehicle_id=pick(body, "car", "vehicle_id", "vehicleId"),
        owner_user_id=pick(body, "user", "owner_id", "ownerId", "user_id", "userId"),
        guest_name=pick(body, "name", "guest_name"),
        guest_email=pick(body, "email", "guest_email"),
        phone=pick(body, "phone"),
        start=pick(body, "startDate", "start_date", "start"),
        end=pick(body, "endDate", "end_date", "end"),
        total_price=pick(body, "totalPrice", "total_price"),
        status=pick(body, "status") or ReservationStatus.PENDING,
        tz_name=current_app.config["RENTAL_TIMEZONE"],
    )
    return jsonify(reservation.to_json()), 201


@bp.get("")
def list_bookings():
    """
    List bookings, optionally filtered by car, owner or guest email.
    `user` (the old query name) and `owner`/`ownerId` all filter the same owner field.
    """
    args = request.args
    rows = ReservationService.list_reservations(
        vehicle_id=args.get("car") or args.get("vehicleId"),
        owner_id=args.get("user") or args.get("owner") or args.get("ownerId") or args.get("userId"),
        guest_email=args.get("email"),
    )
    return jsonify([r.to_json() for r in rows])


@bp.get("/<rid>")
def get_booking(rid):
    return jsonify(ReservationService.get_reservation(rid).to_json())


@bp.delete("/<rid>")
def delete_booking(rid):
    deleted = ReservationService.delete_reservation(
        rid, tz_name=current_app.config["RENTAL_TIMEZONE"])
    return jsonify({"message": "Booking cancelled.", "id": deleted.reservation_id})


@bp.patch("/<rid>/status")
@json_body
def update_booking_status(rid, body):
    """Admin override of a booking's status (pending/confirmed/completed/cancelled)."""
    updated = ReservationService.update_reservation_status(
        rid, body.get("status"), tz_name=current_app.config["RENTAL_TIMEZONE"])
    return jsonify(updated.to_json())
