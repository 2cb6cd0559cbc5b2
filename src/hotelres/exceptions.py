"""Custom exceptions for hotelres."""
from __future__ import annotations

from typing import Any, Optional


class HotelResError(Exception):
    """Base exception for all hotelres errors."""
    pass


class ConfigurationError(HotelResError):
    """Raised when configuration is invalid or missing."""
    pass


class StorageUnavailable(HotelResError):
    """Raised when a backing record file cannot be read or written."""
    pass


class MalformedRecord(HotelResError):
    """Raised when a stored line cannot be decoded into a record."""

    def __init__(self, message: str, line: Optional[str] = None, line_number: Optional[int] = None):
        self.line = line
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class NotFound(HotelResError):
    """Raised when a reservation or room lookup has no match."""
    pass


class PaymentDeclined(HotelResError):
    """Raised when a charge or refund is refused by the payment gateway."""

    def __init__(self, message: str, result: Any = None):
        self.result = result
        super().__init__(message)


class RoomUnavailable(HotelResError):
    """Raised when the requested room overlaps an existing confirmed reservation."""
    pass


class AlreadyCancelled(HotelResError):
    """Raised when cancelling a reservation that is already cancelled."""
    pass


class InvalidRequest(HotelResError):
    """Raised when a search or booking request fails validation."""
    pass
