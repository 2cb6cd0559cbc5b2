from .base import ReservationAdapter, RoomAdapter
from .flatfile import FlatFileReservationAdapter, FlatFileRoomAdapter

__all__ = [
    "ReservationAdapter",
    "RoomAdapter",
    "FlatFileReservationAdapter",
    "FlatFileRoomAdapter",
]
