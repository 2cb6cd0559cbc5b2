from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional

from hotelres.adapters.base import RoomAdapter
from hotelres.models import Reservation, Room, RoomType, dates_overlap

logger = logging.getLogger(__name__)

__all__ = ["RoomCatalog", "dates_overlap"]


class RoomCatalog:
    """
    Read-only view over the room inventory that answers availability queries.

    Availability is computed against whatever reservation snapshot the caller
    passes in; the catalog never reads or mutates reservation storage itself.
    """

    def __init__(self, adapter: RoomAdapter):
        self.adapter = adapter

    def all(self) -> List[Room]:
        return self.adapter.list_rooms()

    def by_id(self, room_id: int) -> Optional[Room]:
        return next((r for r in self.all() if r.id == room_id), None)

    def is_available(
        self,
        room_id: int,
        check_in: date,
        check_out: date,
        reservations: Iterable[Reservation],
    ) -> bool:
        return not any(r.blocks(room_id, check_in, check_out) for r in reservations)

    def find_available(
        self,
        check_in: date,
        check_out: date,
        room_type: Optional[RoomType] = None,
        reservations: Iterable[Reservation] = (),
    ) -> List[Room]:
        """Rooms (optionally of one type) with no non-cancelled overlap in [check_in, check_out)."""
        rooms = self.all()
        if room_type is not None:
            rooms = [r for r in rooms if r.type == room_type]

        # Only confirmed reservations can block a room.
        active = [r for r in reservations if not r.is_cancelled()]

        available = []
        for room in rooms:
            is_busy = False
            for res in active:
                if res.room_id != room.id:
                    continue
                if dates_overlap(check_in, check_out, res.check_in, res.check_out):
                    is_busy = True
                    break
            if not is_busy:
                available.append(room)

        logger.debug(
            f"Availability {check_in}..{check_out} type={room_type.value if room_type else 'ANY'}: "
            f"{[r.id for r in available]}"
        )
        return available

    @staticmethod
    def quote(room: Room, check_in: date, check_out: date) -> float:
        """Total price for the stay: nights times nightly rate."""
        nights = (check_out - check_in).days
        return nights * room.price_per_night
