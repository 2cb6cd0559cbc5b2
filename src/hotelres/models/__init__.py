from .room import Room, RoomType
from .reservation import Reservation, ReservationStatus, PaymentStatus, dates_overlap

__all__ = [
    "dates_overlap",
    "Room",
    "RoomType",
    "Reservation",
    "ReservationStatus",
    "PaymentStatus",
]
