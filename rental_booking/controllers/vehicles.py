from flask import Blueprint, jsonify, request

from ..services.vehicle_service import VehicleService
from ..utils.dates import to_iso
from ..utils.decorators import json_body, pick

bp = Blueprint("vehicles", __name__, url_prefix="/api/cars")


@bp.get("")
def list_vehicles():
    """All cars; `?isAvailable=true|false` narrows by the availability flag."""
    flag = (request.args.get("isAvailable") or "").strip().lower()
    available = {"true": True, "false": False}.get(flag)
    return jsonify([v.to_json() for v in VehicleService.all_vehicles(available=available)])


@bp.post("")
@json_body
def create_vehicle(body):
    vehicle = VehicleService.create_vehicle({
        "brand": body.get("brand"),
        "model": body.get("model"),
        "type": body.get("type"),
        "price_per_day": pick(body, "pricePerDay", "price_per_day"),
        "image_url": pick(body, "imageUrl", "image_url"),
    })
    return jsonify(vehicle.to_json()), 201


@bp.get("/<vid>")
def vehicle_detail(vid):
    return jsonify(VehicleService.get_vehicle(vid).to_json())


@bp.put("/<vid>")
@json_body
def update_vehicle(vid, body):
    """Partial update; `isAvailable` is rejected because bookings decide it."""
    vehicle = VehicleService.update_vehicle(vid, {
        "brand": body.get("brand"),
        "model": body.get("model"),
        "type": body.get("type"),
        "price_per_day": pick(body, "pricePerDay", "price_per_day"),
        "image_url": pick(body, "imageUrl", "image_url"),
        "is_available": pick(body, "isAvailable", "is_available"),
    })
    return jsonify(vehicle.to_json())


@bp.delete("/<vid>")
def delete_vehicle(vid):
    VehicleService.delete_vehicle(vid)
    return jsonify({"message": "Car deleted.", "id": vid})


@bp.get("/<vid>/calendar")
def vehicle_calendar(vid):
    """Booked ranges for the car, so clients can disable those dates."""
    ranges = VehicleService.availability_calendar(vid)
    return jsonify([{"start": to_iso(s), "end": to_iso(e)} for (s, e) in ranges])


@bp.post("/reconcile")
def reconcile():
    """Recompute every car's availability flag from its bookings."""
    return jsonify(VehicleService.reconcile_availability())
