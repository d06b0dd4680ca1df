from .availability_service import AvailabilitySynchronizer
from .notification_service import NotificationService, NotificationSink, StoreNotificationSink
from .overlap_checker import OverlapChecker
from .reservation_service import ReservationService
from .vehicle_service import VehicleService

__all__ = [
    "AvailabilitySynchronizer",
    "NotificationService",
    "NotificationSink",
    "OverlapChecker",
    "ReservationService",
    "StoreNotificationSink",
    "VehicleService",
]
