import atexit
import logging
import os
import pickle
import threading
import uuid
from pathlib import Path

from ..utils.constants import LEGACY_OWNER_KEYS
from .reservation import owner_from_legacy

logger = logging.getLogger(__name__)

# ---- Paths ----
BASE_DIR = Path(__file__).resolve().parents[2]
DEFAULT_DATA_PATH = Path(os.getenv("DATA_PATH") or BASE_DIR / "data.pkl")


def _normalize_reservation(r: dict) -> dict:
    """Fold legacy owner fields into the single canonical `owner_id`."""
    r = dict(r)
    r["owner_id"] = owner_from_legacy(r)
    for key in LEGACY_OWNER_KEYS:
        r.pop(key, None)
    return r


class Store:
    """
    Pickle-backed in-memory store for vehicles, reservations and notifications.
    Every mutation happens under a re-entrant lock and is flushed to disk.
    """
    _inst = None
    _inst_lock = threading.Lock()
    _atexit_registered = False

    def __init__(self, path: str | os.PathLike | None = None):
        self.path = str(path or DEFAULT_DATA_PATH)
        self.vehicles: dict[str, dict] = {}
        self.reservations: dict[str, dict] = {}
        self.notifications: dict[str, dict] = {}
        self._rw = threading.RLock()

        logger.info("Using file: %s", self.path)
        self._load()

        # Automatically save on exit (skipped in test environments)
        if not Store._atexit_registered and os.getenv("APP_ENV") != "test":
            atexit.register(self.save)
            Store._atexit_registered = True

    # ---------- Singleton ----------
    @classmethod
    def instance(cls, path: str | os.PathLike | None = None):
        """Return the global singleton instance of Store."""
        with cls._inst_lock:
            if cls._inst is None:
                cls._inst = Store(path or DEFAULT_DATA_PATH)
        return cls._inst

    # ---------- Persistence ----------
    def _load(self):
        """Load data from the pickle file, or start empty if unavailable or invalid."""
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "rb") as f:
                data = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError, AttributeError, ImportError, ValueError) as e:
            logger.warning("Load failed (%s); starting empty.", e)
            return

        if isinstance(data, dict):
            self.vehicles = data.get("vehicles", {}) or {}
            self.reservations = {
                rid: _normalize_reservation(r)
                for rid, r in (data.get("reservations", {}) or {}).items()
            }
            self.notifications = data.get("notifications", {}) or {}
            logger.info(
                "Loaded: vehicles=%d, reservations=%d, notifications=%d",
                len(self.vehicles), len(self.reservations), len(self.notifications),
            )
        else:
            # Handle incompatible data format: backup the old file and start empty
            bak = self.path + ".bak"
            try:
                os.replace(self.path, bak)
                logger.warning("Incompatible store (%s); backed up to %s. Starting empty.",
                               type(data).__name__, bak)
            except OSError as e:
                logger.error("Backup failed: %s", e)

    def _dump(self):
        """Write the in-memory data to the pickle file safely (atomic replace)."""
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        tmp = self.path + ".tmp"
        payload = {
            "vehicles": self.vehicles,
            "reservations": self.reservations,
            "notifications": self.notifications,
        }
        with open(tmp, "wb") as f:
            pickle.dump(payload, f, protocol=pickle.HIGHEST_PROTOCOL)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)

    def save(self):
        """Thread-safe save method."""
        with self._rw:
            logger.debug("Saving to %s ...", self.path)
            self._dump()

    # ---------- Vehicles ----------
    def create_vehicle(self, data: dict) -> str:
        """Create a new vehicle record and return its ID."""
        with self._rw:
            vid = str(data.get("vehicle_id") or uuid.uuid4())
            self.vehicles[vid] = {
                "vehicle_id": vid,
                "brand": data.get("brand", ""),
                "model": data.get("model", ""),
                "type": data.get("type", "car"),
                "price_per_day": float(data.get("price_per_day") or 0),
                "is_available": bool(data.get("is_available", True)),
                "image_url": data.get("image_url") or "",
            }
            self._dump()
            return vid

    def get_vehicle(self, vehicle_id: str) -> dict | None:
        """Get vehicle information by ID."""
        with self._rw:
            v = self.vehicles.get(str(vehicle_id))
            return dict(v) if v else None

    def all_vehicles(self) -> list[dict]:
        with self._rw:
            return [dict(v) for v in self.vehicles.values()]

    def update_vehicle(self, vehicle_id: str, fields: dict) -> dict | None:
        """Merge `fields` into a vehicle record; return the updated record or None."""
        with self._rw:
            v = self.vehicles.get(str(vehicle_id))
            if v is None:
                return None
            v.update(fields)
            self._dump()
            return dict(v)

    def delete_vehicle(self, vehicle_id: str) -> dict | None:
        """Delete a vehicle by ID; return the removed record or None."""
        with self._rw:
            v = self.vehicles.pop(str(vehicle_id), None)
            if v is not None:
                self._dump()
            return v

    def set_vehicle_availability(self, vehicle_id: str, available: bool) -> bool:
        """Write the availability flag; return False if the vehicle does not exist."""
        with self._rw:
            v = self.vehicles.get(str(vehicle_id))
            if v is None:
                return False
            if v.get("is_available") != available:
                v["is_available"] = available
                self._dump()
            return True

    # ---------- Reservations ----------
    def create_reservation(self, r: dict) -> str:
        """Create a new reservation record and return its ID."""
        with self._rw:
            rid = str(uuid.uuid4())
            r = _normalize_reservation(r)
            r["reservation_id"] = rid
            self.reservations[rid] = r
            self._dump()
            return rid

    def get_reservation(self, rid: str) -> dict | None:
        with self._rw:
            r = self.reservations.get(str(rid))
            return dict(r) if r else None

    def find_reservations(self, vehicle_id=None, owner_id=None, guest_email=None) -> list[dict]:
        """Return reservations matching every given filter (exact match)."""
        with self._rw:
            out = []
            for r in self.reservations.values():
                if vehicle_id is not None and r.get("vehicle_id") != str(vehicle_id):
                    continue
                if owner_id is not None and r.get("owner_id") != str(owner_id):
                    continue
                if guest_email is not None and r.get("guest_email") != guest_email:
                    continue
                out.append(dict(r))
            return out

    def update_reservation_status(self, rid: str, status: str) -> dict | None:
        """Set a reservation's status; return the updated record or None."""
        with self._rw:
            r = self.reservations.get(str(rid))
            if r is None:
                return None
            r["status"] = status
            self._dump()
            return dict(r)

    def delete_reservation(self, rid: str) -> dict | None:
        """Delete a reservation by ID; return the removed record or None."""
        with self._rw:
            r = self.reservations.pop(str(rid), None)
            if r is not None:
                self._dump()
            return r

    # ---------- Notifications ----------
    def add_notification(self, n: dict) -> str:
        with self._rw:
            nid = str(uuid.uuid4())
            n = dict(n)
            n["notification_id"] = nid
            self.notifications[nid] = n
            self._dump()
            return nid

    def list_notifications(self, owner_id=None) -> list[dict]:
        """All notifications, or only those addressed to `owner_id`."""
        with self._rw:
            return [
                dict(n) for n in self.notifications.values()
                if owner_id is None or n.get("owner_id") == str(owner_id)
            ]

    def mark_notifications_seen(self, owner_id: str) -> int:
        """Mark an owner's unseen notifications as seen; return how many changed."""
        with self._rw:
            changed = 0
            for n in self.notifications.values():
                if n.get("owner_id") == str(owner_id) and not n.get("seen"):
                    n["seen"] = True
                    changed += 1
            if changed:
                self._dump()
            return changed
