from __future__ import annotations

import logging
import os
import tempfile
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TypeVar, Union

from hotelres import codec
from hotelres.exceptions import (
    AlreadyCancelled,
    MalformedRecord,
    NotFound,
    RoomUnavailable,
    StorageUnavailable,
)
from hotelres.models import PaymentStatus, Reservation, ReservationStatus, Room

logger = logging.getLogger(__name__)

FIRST_RESERVATION_ID = 1001

T = TypeVar("T")

PathLike = Union[str, "os.PathLike[str]"]


# ------------------------------------
# File helpers
# ------------------------------------
def atomic_write(path: Path, content: str) -> None:
    """
    Replace path with content: write a sibling temp file, fsync it, then
    os.replace it over the target so readers see either the old or new file.
    """
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            newline="",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
        _fsync_dir(path.parent)
    except OSError as e:
        logger.error(f"Atomic write to {path} failed: {e}")
        raise StorageUnavailable(f"Could not write {path}: {e}") from e
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.warning(f"Could not remove temp file {tmp_name}")


def _fsync_dir(directory: Path) -> None:
    """Persist a rename by syncing its directory entry (POSIX only)."""
    if os.name != "posix":
        return
    fd = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def read_file(path: Path, from_fields: Callable[[List[str], Optional[str]], T]) -> List[T]:
    """
    Decode every record in path. A missing file reads as empty; undecodable
    bytes surface as MalformedRecord and other I/O errors as StorageUnavailable.
    """
    try:
        with open(path, "r", encoding="utf-8", newline="") as fh:
            return list(codec.read_records(fh, from_fields))
    except FileNotFoundError:
        return []
    except UnicodeDecodeError as e:
        logger.error(f"Undecodable bytes in {path}: {e}")
        raise MalformedRecord(f"invalid UTF-8 in {path}: {e}") from e
    except OSError as e:
        logger.error(f"Could not read {path}: {e}")
        raise StorageUnavailable(f"Could not read {path}: {e}") from e


def _ends_without_newline(path: Path) -> bool:
    with open(path, "rb") as fh:
        fh.seek(0, os.SEEK_END)
        if fh.tell() == 0:
            return False
        fh.seek(-1, os.SEEK_END)
        return fh.read(1) != b"\n"


class FlatFileRoomAdapter:
    """Room catalog stored as one CSV line per room."""

    def __init__(self, path: PathLike):
        self.path = Path(path)

    # ------------------------------------
    # Lifecycle
    # ------------------------------------
    def init(self, seed: Sequence[Room] = ()) -> None:
        """Seed the room file if it does not exist yet."""
        if self.path.exists():
            return
        logger.info(f"Seeding {len(seed)} rooms into {self.path}")
        self.save_all(seed)

    # ------------------------------------
    # Rooms
    # ------------------------------------
    def list_rooms(self) -> List[Room]:
        return read_file(self.path, codec.room_from_fields)

    def get_room(self, room_id: int) -> Optional[Room]:
        return next((r for r in self.list_rooms() if r.id == room_id), None)

    def save_all(self, rooms: Sequence[Room]) -> None:
        atomic_write(self.path, codec.write_lines(rooms))


class FlatFileReservationAdapter:
    """
    Authoritative reservation list stored as one CSV line per reservation.

    Every public operation runs under a single re-entrant lock, so id
    allocation and cancel rewrites never interleave between threads.
    """

    def __init__(self, path: PathLike, clock: Optional[Callable[[], datetime]] = None):
        self.path = Path(path)
        self._clock = clock or datetime.now
        self._lock = threading.RLock()

    # ------------------------------------
    # Lifecycle
    # ------------------------------------
    def init(self) -> None:
        """Create an empty reservation file if it does not exist yet."""
        with self._lock:
            if self.path.exists():
                return
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.touch()
            except OSError as e:
                logger.error(f"Could not create {self.path}: {e}")
                raise StorageUnavailable(f"Could not create {self.path}: {e}") from e
            logger.info(f"Created empty reservation file {self.path}")

    # ------------------------------------
    # Reads
    # ------------------------------------
    def load_all(self) -> List[Reservation]:
        with self._lock:
            return read_file(self.path, codec.reservation_from_fields)

    def find_by_id(self, reservation_id: int) -> Optional[Reservation]:
        with self._lock:
            return next((r for r in self.load_all() if r.id == reservation_id), None)

    def list_for_room(self, room_id: int) -> List[Reservation]:
        with self._lock:
            return [r for r in self.load_all() if r.room_id == room_id]

    # ------------------------------------
    # Writes
    # ------------------------------------
    def create(
        self,
        room_id: int,
        guest_name: str,
        check_in: date,
        check_out: date,
        amount: float,
        payment_txn_id: Optional[str],
    ) -> Reservation:
        """Append a CONFIRMED/PAID reservation. Availability is the caller's concern."""
        with self._lock:
            snapshot = self.load_all()
            return self._append_new(snapshot, room_id, guest_name, check_in, check_out, amount, payment_txn_id)

    def create_if_available(
        self,
        room_id: int,
        guest_name: str,
        check_in: date,
        check_out: date,
        amount: float,
        payment_txn_id: Optional[str],
    ) -> Reservation:
        """Check the room against current reservations and create in one critical section."""
        with self._lock:
            snapshot = self.load_all()
            clash = next((r for r in snapshot if r.blocks(room_id, check_in, check_out)), None)
            if clash is not None:
                logger.warning(
                    f"Room {room_id} unavailable for {check_in}..{check_out}: "
                    f"overlaps reservation {clash.id}"
                )
                raise RoomUnavailable(
                    f"Room {room_id} is already booked between {clash.check_in} and {clash.check_out}"
                )
            return self._append_new(snapshot, room_id, guest_name, check_in, check_out, amount, payment_txn_id)

    def cancel(self, reservation_id: int, refund_txn_id: Optional[str] = None) -> Reservation:
        """
        Mark a reservation CANCELLED and rewrite the whole file atomically.

        With a refund_txn_id the payment status becomes REFUNDED, otherwise it
        is left as is. Unknown ids raise NotFound and already cancelled ones
        raise AlreadyCancelled; in both cases the file is not touched.
        """
        return self.cancel_with(reservation_id, lambda _current: refund_txn_id)

    def cancel_with(
        self,
        reservation_id: int,
        refund_for: Callable[[Reservation], Optional[str]],
    ) -> Reservation:
        """
        Cancel with the refund decided inside the critical section.

        refund_for receives the current CONFIRMED record and returns a refund
        txn id or None. If it raises, nothing is written. Concurrent cancels of
        the same reservation therefore call it at most once.
        """
        with self._lock:
            snapshot = self.load_all()
            index = next((i for i, r in enumerate(snapshot) if r.id == reservation_id), None)
            if index is None:
                raise NotFound(f"Reservation {reservation_id} not found")

            current = snapshot[index]
            if current.is_cancelled():
                raise AlreadyCancelled(f"Reservation {reservation_id} is already cancelled")

            refund_txn_id = refund_for(current)
            updated = current.cancelled(refund_txn_id)
            snapshot[index] = updated
            try:
                atomic_write(self.path, codec.write_lines(snapshot))
            except StorageUnavailable:
                if refund_txn_id:
                    logger.error(
                        f"Refund {refund_txn_id} issued but reservation {reservation_id} "
                        f"could not be marked cancelled"
                    )
                raise

            logger.info(
                f"Reservation {reservation_id} cancelled "
                f"(payment: {updated.payment_status.value}, refund txn: {refund_txn_id})"
            )
            return updated

    # ------------------------------------
    # Internals
    # ------------------------------------
    @staticmethod
    def _next_id(snapshot: Sequence[Reservation]) -> int:
        return max((r.id for r in snapshot), default=FIRST_RESERVATION_ID - 1) + 1

    def _append_new(
        self,
        snapshot: Sequence[Reservation],
        room_id: int,
        guest_name: str,
        check_in: date,
        check_out: date,
        amount: float,
        payment_txn_id: Optional[str],
    ) -> Reservation:
        reservation = Reservation(
            id=self._next_id(snapshot),
            room_id=room_id,
            guest_name=guest_name,
            check_in=check_in,
            check_out=check_out,
            total_amount=float(amount),
            created_at=self._clock(),
            payment_txn_id=payment_txn_id,
            payment_status=PaymentStatus.PAID,
            status=ReservationStatus.CONFIRMED,
            refund_txn_id=None,
        )
        self._append(reservation)
        logger.info(
            f"Reservation {reservation.id} created for room {room_id} "
            f"({check_in}..{check_out}, amount {reservation.total_amount})"
        )
        return reservation

    def _append(self, reservation: Reservation) -> None:
        line = codec.encode_reservation(reservation) + "\n"
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if self.path.exists() and _ends_without_newline(self.path):
                line = "\n" + line
            with open(self.path, "a", encoding="utf-8", newline="") as fh:
                fh.write(line)
                fh.flush()
                os.fsync(fh.fileno())
        except OSError as e:
            logger.error(f"Could not append reservation {reservation.id} to {self.path}: {e}")
            raise StorageUnavailable(f"Could not write {self.path}: {e}") from e
