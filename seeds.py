import logging

from rental_booking import create_app
from rental_booking.models.store import Store
from rental_booking.services.vehicle_service import VehicleService

logger = logging.getLogger(__name__)

DEMO_VEHICLES = [
    {"brand": "Toyota", "model": "Corolla", "type": "car", "price_per_day": 45,
     "image_url": "/static/images/corolla.jpg"},
    {"brand": "Honda", "model": "Civic", "type": "car", "price_per_day": 50,
     "image_url": "/static/images/civic.jpg"},
    {"brand": "Yamaha", "model": "MT-07", "type": "motorbike", "price_per_day": 40,
     "image_url": "/static/images/yamaha.jpg"},
    {"brand": "Isuzu", "model": "N-Series", "type": "truck", "price_per_day": 95,
     "image_url": "/static/images/isuzu.jpg"},
]


def ensure_vehicles(store: Store) -> int:
    """Create the demo fleet when the store has no vehicles; return how many were added."""
    if store.vehicles:
        return 0
    for payload in DEMO_VEHICLES:
        VehicleService.create_vehicle(payload, store=store)
    return len(DEMO_VEHICLES)


def main():
    app = create_app()
    with app.app_context():
        store = Store.instance()
        added = ensure_vehicles(store)
        store.save()
        logger.info("Seed complete: %d vehicles added, %d total.", added, len(store.vehicles))


if __name__ == "__main__":
    main()
