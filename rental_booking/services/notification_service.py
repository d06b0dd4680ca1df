"""Notification sink and the read side used by the notifications API."""

from __future__ import annotations

from typing import Optional

from rental_booking.models.notification import Notification
from rental_booking.services.common import resolve_store
from rental_booking.utils.constants import NOTIFICATION_LIMIT
from rental_booking.utils.dates import utcnow


class NotificationSink:
    """Receives reservation lifecycle events. Subclasses decide the delivery."""

    def emit(self, owner_id: Optional[str], event_type: str, message: str) -> None:
        raise NotImplementedError


class StoreNotificationSink(NotificationSink):
    """Default sink: keeps events in the store so users can poll for them."""

    def __init__(self, store=None):
        self.store = store

    def emit(self, owner_id, event_type, message):
        resolve_store(self.store).add_notification({
            "owner_id": str(owner_id) if owner_id else None,
            "type": event_type,
            "message": message,
            "seen": False,
            "created_at": utcnow(),
        })


class NotificationService:
    """Latest notifications per user (or all of them for admins) and read markers."""

    @staticmethod
    def latest(owner_id=None, limit: int = NOTIFICATION_LIMIT, *, store=None) -> list[Notification]:
        st = resolve_store(store)
        rows = [Notification.from_dict(n) for n in st.list_notifications(owner_id=owner_id)]
        rows.sort(key=lambda n: n.created_at, reverse=True)
        return rows[:limit]

    @staticmethod
    def mark_seen(owner_id, *, store=None) -> int:
        return resolve_store(store).mark_notifications_seen(owner_id)
