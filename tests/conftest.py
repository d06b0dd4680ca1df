import os
import pathlib
import sys

os.environ.setdefault("APP_ENV", "test")

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import pytest

from rental_booking import create_app
from rental_booking.models.store import Store


@pytest.fixture(autouse=True)
def store(tmp_path, monkeypatch):
    """
    Provide a fresh pickle-backed store per test and make it the singleton,
    so services and controllers all see the SAME object.
    """
    st = Store(tmp_path / "data.pkl")
    monkeypatch.setattr(Store, "_inst", st)
    yield st


@pytest.fixture
def vehicle_id(store):
    return store.create_vehicle({
        "brand": "Toyota",
        "model": "Corolla",
        "type": "car",
        "price_per_day": 55.0,
    })


@pytest.fixture
def client(store, tmp_path):
    app = create_app({"TESTING": True, "DATA_PATH": str(tmp_path / "data.pkl")})
    with app.test_client() as c:
        yield c
