"""
Base configuration abstractions for hotelres.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from hotelres.adapters.base import ReservationAdapter, RoomAdapter
from hotelres.models import Room, RoomType
from hotelres.services import BookingService, PaymentSimulator, RoomCatalog
from hotelres.services.booking_service import DEFAULT_REFUND_CUTOFF_DAYS, PaymentGateway

DEFAULT_ROOMS: List[Room] = [
    Room(1, "101", RoomType.STANDARD, 2499.0),
    Room(2, "102", RoomType.STANDARD, 2499.0),
    Room(3, "201", RoomType.DELUXE, 3999.0),
    Room(4, "202", RoomType.DELUXE, 3999.0),
    Room(5, "301", RoomType.SUITE, 6999.0),
]


class HotelResConfig(ABC):
    """Abstract configuration contract for storage locations and booking policy."""

    @abstractmethod
    def get_data_dir(self) -> Path:
        """Directory holding the record files."""

    @abstractmethod
    def get_rooms_file(self) -> Path:
        """Path of the room catalog file."""

    @abstractmethod
    def get_reservations_file(self) -> Path:
        """Path of the reservation file."""

    @abstractmethod
    def create_room_adapter(self) -> RoomAdapter:
        """Create and initialise (seed if missing) the room storage adapter."""

    @abstractmethod
    def create_reservation_adapter(self) -> ReservationAdapter:
        """Create and initialise the reservation storage adapter."""

    def get_refund_cutoff_days(self) -> int:
        """Minimum days before check-in for a cancellation to be refunded."""
        return DEFAULT_REFUND_CUTOFF_DAYS

    def get_log_level(self) -> str:
        return "WARNING"

    def get_currency_symbol(self) -> str:
        return "₹"

    def get_seed_rooms(self) -> List[Room]:
        """Inventory written when the room file does not exist."""
        return list(DEFAULT_ROOMS)

    def create_catalog(self) -> RoomCatalog:
        return RoomCatalog(self.create_room_adapter())

    def create_payment_gateway(self) -> PaymentGateway:
        return PaymentSimulator()

    def create_booking_service(self) -> BookingService:
        return BookingService(
            catalog=self.create_catalog(),
            store=self.create_reservation_adapter(),
            payments=self.create_payment_gateway(),
            refund_cutoff_days=self.get_refund_cutoff_days(),
        )
