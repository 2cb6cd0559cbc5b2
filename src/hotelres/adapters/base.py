from __future__ import annotations

from datetime import date
from typing import Callable, List, Optional, Protocol, Sequence, runtime_checkable

from hotelres.models import Reservation, Room


@runtime_checkable
class RoomAdapter(Protocol):
    # lifecycle
    def init(self, seed: Sequence[Room] = ()) -> None: ...

    # rooms
    def list_rooms(self) -> List[Room]: ...
    def get_room(self, room_id: int) -> Optional[Room]: ...
    def save_all(self, rooms: Sequence[Room]) -> None: ...


@runtime_checkable
class ReservationAdapter(Protocol):
    # lifecycle
    def init(self) -> None: ...

    # reservations
    def load_all(self) -> List[Reservation]: ...
    def find_by_id(self, reservation_id: int) -> Optional[Reservation]: ...
    def list_for_room(self, room_id: int) -> List[Reservation]: ...

    def create(
        self,
        room_id: int,
        guest_name: str,
        check_in: date,
        check_out: date,
        amount: float,
        payment_txn_id: Optional[str],
    ) -> Reservation: ...

    def create_if_available(
        self,
        room_id: int,
        guest_name: str,
        check_in: date,
        check_out: date,
        amount: float,
        payment_txn_id: Optional[str],
    ) -> Reservation: ...

    def cancel(self, reservation_id: int, refund_txn_id: Optional[str] = None) -> Reservation: ...
    def cancel_with(
        self,
        reservation_id: int,
        refund_for: Callable[[Reservation], Optional[str]],
    ) -> Reservation: ...
