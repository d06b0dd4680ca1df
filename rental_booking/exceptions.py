"""
Custom exception classes for the reservation engine.

Services raise these so that callers (the JSON controllers, scripts, tests)
can tell a bad request from a conflict or a missing record instead of
seeing a generic 500 error.
"""


class BookingError(Exception):
    """Base class for every recoverable reservation failure."""

    status_code = 400

    def __init__(self, message: str = "Error: booking request failed") -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class ValidationError(BookingError):
    """Raised when a required field is missing or malformed, or start >= end."""

    def __init__(self, message: str = "Error: invalid reservation data") -> None:
        super().__init__(message)


class ReservationConflictError(BookingError):
    """Raised when the requested interval overlaps an existing reservation."""

    status_code = 409

    def __init__(self, message: str = "Error: car already booked for those dates") -> None:
        super().__init__(message)


class ReservationNotFoundError(BookingError):
    """Raised when a reservation ID cannot be found in the system."""

    status_code = 404

    def __init__(self, message: str = "Error: reservation not found") -> None:
        super().__init__(message)


class VehicleNotFoundError(BookingError):
    """Raised when a vehicle ID cannot be found in the system."""

    status_code = 404

    def __init__(self, message: str = "Error: vehicle not found") -> None:
        super().__init__(message)


class InvalidStatusError(BookingError):
    """Raised when a status update names a value outside the known lifecycle."""

    def __init__(self, message: str = "Error: invalid reservation status") -> None:
        super().__init__(message)


class VehicleInUseError(BookingError):
    """Raised when a vehicle with pending, confirmed or completed bookings is deleted."""

    status_code = 409

    def __init__(self, message: str = "Cannot delete: active bookings exist.") -> None:
        super().__init__(message)
