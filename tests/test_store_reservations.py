"""
Store-level behavior: filtered listing, the single canonical owner field,
migration of records written with the old owner field names, persistence.
"""

import pickle
from datetime import datetime, timezone

from rental_booking.models.store import Store
from rental_booking.services.reservation_service import ReservationService


def day(n):
    return datetime(2030, 11, n, tzinfo=timezone.utc)


def put(store, vehicle_id, start, end, status="pending", **owner):
    return store.create_reservation({
        "vehicle_id": vehicle_id,
        "start": day(start),
        "end": day(end),
        "total_price": 10.0,
        "status": status,
        **owner,
    })


def test_find_combines_filters(store, vehicle_id):
    other = store.create_vehicle({"brand": "Honda", "model": "Fit", "type": "car", "price_per_day": 40})
    put(store, vehicle_id, 1, 2, owner_id="u1")
    put(store, vehicle_id, 3, 4, owner_id="u2")
    put(store, other, 1, 2, owner_id="u1")
    put(store, other, 5, 6, guest_name="Ana", guest_email="ana@example.com")

    assert len(store.find_reservations(vehicle_id=vehicle_id)) == 2
    assert len(store.find_reservations(owner_id="u1")) == 2
    assert len(store.find_reservations(vehicle_id=other, owner_id="u1")) == 1
    assert len(store.find_reservations(guest_email="ana@example.com")) == 1
    assert store.find_reservations(guest_email="ANA@example.com") == []


def test_legacy_owner_keys_are_folded_on_create(store, vehicle_id):
    rid = put(store, vehicle_id, 1, 2, renter_id="legacy-7")
    record = store.reservations[rid]
    assert record["owner_id"] == "legacy-7"
    assert "renter_id" not in record
    assert [r.reservation_id for r in ReservationService.list_reservations(owner_id="legacy-7")] == [rid]


def test_legacy_records_are_migrated_on_load(tmp_path):
    path = tmp_path / "old.pkl"
    payload = {
        "vehicles": {"v1": {"vehicle_id": "v1", "brand": "Mazda", "model": "2", "type": "car",
                            "price_per_day": 30.0, "is_available": True}},
        "reservations": {
            "r1": {"reservation_id": "r1", "vehicle_id": "v1", "user": "u1",
                   "start": day(1), "end": day(2), "total_price": 30.0, "status": "confirmed"},
            "r2": {"reservation_id": "r2", "vehicle_id": "v1", "user_id": "u1",
                   "start": day(3), "end": day(4), "total_price": 30.0, "status": "pending"},
        },
        "notifications": {},
    }
    with open(path, "wb") as f:
        pickle.dump(payload, f)

    st = Store(path)
    assert {r["reservation_id"] for r in st.find_reservations(owner_id="u1")} == {"r1", "r2"}
    assert all("user" not in r and "user_id" not in r for r in st.reservations.values())


def test_data_survives_reload(store, vehicle_id):
    rid = put(store, vehicle_id, 1, 2, owner_id="u1")
    store.update_reservation_status(rid, "confirmed")

    reloaded = Store(store.path)
    assert reloaded.reservations[rid]["status"] == "confirmed"
    assert reloaded.reservations[rid]["start"] == day(1)
    assert vehicle_id in reloaded.vehicles


def test_incompatible_file_is_backed_up(tmp_path):
    path = tmp_path / "data.pkl"
    with open(path, "wb") as f:
        pickle.dump(["not", "a", "dict"], f)

    st = Store(path)
    assert st.reservations == {}
    assert (tmp_path / "data.pkl.bak").exists()


def test_delete_and_status_on_missing_ids(store):
    assert store.delete_reservation("nope") is None
    assert store.update_reservation_status("nope", "confirmed") is None
    assert store.set_vehicle_availability("nope", False) is False


def test_list_reservations_orders_by_start_and_ignores_empty_filters(store, vehicle_id):
    late = put(store, vehicle_id, 8, 9, owner_id="u1")
    early = put(store, vehicle_id, 1, 2, owner_id="u1")
    rows = ReservationService.list_reservations(vehicle_id=vehicle_id, owner_id="", guest_email="  ")
    assert [r.reservation_id for r in rows] == [early, late]
