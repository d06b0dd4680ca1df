"""
Concurrent callers on the same vehicle: the check-then-insert and the
write-then-resync sequences must behave as if serialized.
"""

import threading
from datetime import datetime, timezone

import pytest

from rental_booking.exceptions import ReservationConflictError, VehicleNotFoundError
from rental_booking.services.common import vehicle_locks
from rental_booking.services.reservation_service import ReservationService
from rental_booking.utils.locks import KeyedLock

THREADS = 8


def day(n):
    return datetime(2030, 11, n, tzinfo=timezone.utc)


def run_together(fn, n=THREADS):
    """Start n threads that all call fn(i) at the same moment; collect results."""
    barrier = threading.Barrier(n)
    results = [None] * n

    def worker(i):
        barrier.wait()
        try:
            results[i] = fn(i)
        except Exception as e:  # collected and asserted on by the caller
            results[i] = e

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(n)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return results


def test_racing_overlapping_requests_accept_exactly_one(store, vehicle_id):
    results = run_together(lambda i: ReservationService.create_reservation(
        vehicle_id=vehicle_id,
        owner_user_id=f"u{i}",
        start=day(1 + (i % 2)),
        end=day(6),
        total_price=100,
        status="confirmed",
    ))

    accepted = [r for r in results if not isinstance(r, Exception)]
    rejected = [r for r in results if isinstance(r, ReservationConflictError)]
    assert len(accepted) == 1
    assert len(rejected) == THREADS - 1
    assert len(store.reservations) == 1
    assert store.vehicles[vehicle_id]["is_available"] is False


def test_racing_status_changes_leave_flag_consistent(store, vehicle_id):
    """Non-overlapping bookings flipped concurrently; final flag must match final statuses."""
    ids = [
        ReservationService.create_reservation(
            vehicle_id=vehicle_id, owner_user_id=f"u{i}",
            start=day(1 + 2 * i), end=day(2 + 2 * i), total_price=50,
        ).reservation_id
        for i in range(THREADS)
    ]

    def flip(i):
        rid = ids[i]
        for _ in range(5):
            ReservationService.update_reservation_status(rid, "confirmed")
            ReservationService.update_reservation_status(rid, "cancelled")
        final = "confirmed" if i % 3 == 0 else "completed"
        return ReservationService.update_reservation_status(rid, final)

    results = run_together(flip)
    assert not any(isinstance(r, Exception) for r in results)

    statuses = {r["status"] for r in store.reservations.values()}
    assert "confirmed" in statuses
    assert store.vehicles[vehicle_id]["is_available"] is False

    for rid in ids:
        if store.reservations[rid]["status"] == "confirmed":
            ReservationService.update_reservation_status(rid, "completed")
    assert store.vehicles[vehicle_id]["is_available"] is True


def test_different_vehicles_proceed_independently(store):
    vids = [
        store.create_vehicle({"brand": "Kia", "model": f"Rio {i}", "type": "car", "price_per_day": 30})
        for i in range(THREADS)
    ]
    results = run_together(lambda i: ReservationService.create_reservation(
        vehicle_id=vids[i], owner_user_id="u1",
        start=day(1), end=day(4), total_price=90, status="confirmed",
    ))
    assert not any(isinstance(r, Exception) for r in results)
    assert all(store.vehicles[v]["is_available"] is False for v in vids)


def test_lock_entries_are_released(store, vehicle_id):
    for i in range(50):
        with pytest.raises(VehicleNotFoundError):
            ReservationService.create_reservation(
                vehicle_id=f"unknown-{i}", owner_user_id="u1",
                start=day(1), end=day(2), total_price=10,
            )
    assert len(vehicle_locks) == 0

    r = ReservationService.create_reservation(
        vehicle_id=vehicle_id, owner_user_id="u1",
        start=day(1), end=day(2), total_price=10,
    )
    ReservationService.update_reservation_status(r.reservation_id, "confirmed")
    ReservationService.delete_reservation(r.reservation_id)
    assert len(vehicle_locks) == 0


def test_lock_is_reentrant_and_shared_while_held():
    locks = KeyedLock()
    with locks.hold("v1") as outer:
        with locks.hold("v1") as inner:
            assert inner is outer
        assert len(locks) == 1
    assert len(locks) == 0
