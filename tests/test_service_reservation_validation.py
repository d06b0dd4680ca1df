"""
Input validation for ReservationService.create_reservation: owner/guest rules,
date ordering, price, status and vehicle existence. Nothing is stored when a
request is rejected.
"""

from datetime import datetime, timedelta, timezone

import pytest

from rental_booking.exceptions import (
    InvalidStatusError,
    ValidationError,
    VehicleNotFoundError,
)
from rental_booking.services.reservation_service import ReservationService


def day(n):
    return datetime(2030, 11, n, tzinfo=timezone.utc)


def request(vehicle_id, /, **overrides):
    kwargs = dict(
        vehicle_id=vehicle_id,
        owner_user_id="u1",
        start=day(1),
        end=day(3),
        total_price=99.5,
    )
    kwargs.update(overrides)
    return ReservationService.create_reservation(**kwargs)


def test_guest_without_name_is_rejected(store, vehicle_id):
    """No owner id and an empty guest name -> ValidationError."""
    with pytest.raises(ValidationError):
        request(vehicle_id, owner_user_id=None, guest_name="   ", guest_email="g@example.com")
    assert store.reservations == {}


def test_guest_without_email_is_rejected(vehicle_id):
    with pytest.raises(ValidationError):
        request(vehicle_id, owner_user_id=None, guest_name="Ana", guest_email="")


def test_owner_and_guest_together_is_rejected(vehicle_id):
    with pytest.raises(ValidationError):
        request(vehicle_id, guest_name="Ana", guest_email="ana@example.com")


def test_guest_reservation_is_stored_without_owner(vehicle_id):
    r = request(vehicle_id, owner_user_id=None, guest_name=" Ana ", guest_email="ana@example.com",
                phone="+64 21 000 000")
    assert r.is_guest
    assert r.guest_name == "Ana"
    assert r.phone == "+64 21 000 000"
    assert r.status == "pending"
    assert r.created_at is not None


def test_numeric_phone_is_kept_as_text(vehicle_id):
    assert request(vehicle_id, phone=21000000).phone == "21000000"


@pytest.mark.parametrize("phone", [True, 21.5, ["021"], {"n": "021"}])
def test_malformed_phone_is_rejected(store, vehicle_id, phone):
    with pytest.raises(ValidationError):
        request(vehicle_id, phone=phone)
    assert store.reservations == {}


@pytest.mark.parametrize("start, end", [
    (day(3), day(3)),
    (day(4), day(3)),
    (day(1) + timedelta(hours=5), day(1) + timedelta(hours=4, minutes=59)),
])
def test_start_not_before_end_is_rejected(vehicle_id, start, end):
    with pytest.raises(ValidationError):
        request(vehicle_id, start=start, end=end)


@pytest.mark.parametrize("price", [0, -10, "abc", float("nan"), True])
def test_non_positive_or_malformed_price_is_rejected(vehicle_id, price):
    with pytest.raises(ValidationError):
        request(vehicle_id, total_price=price)


@pytest.mark.parametrize("missing", ["vehicle_id", "start", "end", "total_price"])
def test_missing_required_fields(vehicle_id, missing):
    with pytest.raises(ValidationError):
        request(vehicle_id, **{missing: None})


def test_malformed_date_is_rejected(vehicle_id):
    with pytest.raises(ValidationError):
        request(vehicle_id, start="next tuesday")


def test_string_dates_are_accepted(vehicle_id):
    r = request(vehicle_id, start="2030-11-01", end="2030-11-03T12:00:00Z", total_price="150")
    assert r.start == day(1)
    assert r.end == day(3) + timedelta(hours=12)
    assert r.total_price == 150.0


def test_unknown_vehicle(store):
    with pytest.raises(VehicleNotFoundError):
        request("does-not-exist")
    assert store.reservations == {}


def test_unknown_initial_status(vehicle_id):
    with pytest.raises(InvalidStatusError):
        request(vehicle_id, status="approved")


def test_direct_confirmed_creation(store, vehicle_id):
    r = request(vehicle_id, status="confirmed")
    assert r.status == "confirmed"
    assert store.vehicles[vehicle_id]["is_available"] is False
