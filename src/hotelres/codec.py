"""
Line codec for Room and Reservation records.

Each record is one CSV row. Fields containing the delimiter, a quote or a
line break are quoted with internal quotes doubled; optional text fields are
written as an empty string and read back as None.
"""
from __future__ import annotations

import csv
import io
import logging
from datetime import date, datetime
from typing import Callable, Iterable, Iterator, List, Optional, TypeVar, Union

from hotelres.exceptions import MalformedRecord
from hotelres.models import (
    PaymentStatus,
    Reservation,
    ReservationStatus,
    Room,
    RoomType,
)

logger = logging.getLogger(__name__)

ROOM_FIELDS = ("id", "number", "type", "pricePerNight")
RESERVATION_FIELDS = (
    "id",
    "roomId",
    "guestName",
    "checkIn",
    "checkOut",
    "totalAmount",
    "createdAt",
    "paymentTxnId",
    "paymentStatus",
    "status",
    "refundTxnId",
)

_TERMINATOR = "\r\n"

T = TypeVar("T")


# ------------------------------------
# Field helpers
# ------------------------------------
def _join(values: List[str]) -> str:
    buf = io.StringIO()
    csv.writer(buf, lineterminator=_TERMINATOR, quoting=csv.QUOTE_MINIMAL).writerow(values)
    return buf.getvalue()[: -len(_TERMINATOR)]


def _split(line: str) -> List[str]:
    try:
        rows = list(csv.reader(io.StringIO(line, newline=""), strict=True))
    except csv.Error as e:
        raise MalformedRecord(f"unreadable CSV: {e}", line=line) from e
    if len(rows) != 1:
        raise MalformedRecord(f"expected one record, found {len(rows)}", line=line)
    return rows[0]


def _empty_if_none(value: Optional[str]) -> str:
    return "" if value is None else value


def _none_if_empty(value: str) -> Optional[str]:
    return value if value else None


# ------------------------------------
# Rooms
# ------------------------------------
def encode_room(room: Room) -> str:
    return _join([str(room.id), room.number, room.type.value, repr(float(room.price_per_night))])


def room_from_fields(values: List[str], line: Optional[str] = None) -> Room:
    if len(values) != len(ROOM_FIELDS):
        raise MalformedRecord(
            f"room record needs {len(ROOM_FIELDS)} fields, got {len(values)}", line=line
        )
    try:
        return Room(
            id=int(values[0]),
            number=values[1],
            type=RoomType(values[2]),
            price_per_night=float(values[3]),
        )
    except ValueError as e:
        raise MalformedRecord(f"invalid room record: {e}", line=line) from e


def decode_room(line: str) -> Room:
    return room_from_fields(_split(line), line)


# ------------------------------------
# Reservations
# ------------------------------------
def encode_reservation(res: Reservation) -> str:
    return _join(
        [
            str(res.id),
            str(res.room_id),
            res.guest_name,
            res.check_in.isoformat(),
            res.check_out.isoformat(),
            repr(float(res.total_amount)),
            res.created_at.isoformat(),
            _empty_if_none(res.payment_txn_id),
            res.payment_status.value,
            res.status.value,
            _empty_if_none(res.refund_txn_id),
        ]
    )


def reservation_from_fields(values: List[str], line: Optional[str] = None) -> Reservation:
    if len(values) != len(RESERVATION_FIELDS):
        raise MalformedRecord(
            f"reservation record needs {len(RESERVATION_FIELDS)} fields, got {len(values)}",
            line=line,
        )
    try:
        return Reservation(
            id=int(values[0]),
            room_id=int(values[1]),
            guest_name=values[2],
            check_in=date.fromisoformat(values[3]),
            check_out=date.fromisoformat(values[4]),
            total_amount=float(values[5]),
            created_at=datetime.fromisoformat(values[6]),
            payment_txn_id=_none_if_empty(values[7]),
            payment_status=PaymentStatus(values[8]),
            status=ReservationStatus(values[9]),
            refund_txn_id=_none_if_empty(values[10]),
        )
    except ValueError as e:
        raise MalformedRecord(f"invalid reservation record: {e}", line=line) from e


def decode_reservation(line: str) -> Reservation:
    return reservation_from_fields(_split(line), line)


def encode(record: Union[Room, Reservation]) -> str:
    """Encode either record type to a single CSV row without terminator."""
    if isinstance(record, Reservation):
        return encode_reservation(record)
    if isinstance(record, Room):
        return encode_room(record)
    raise TypeError(f"Cannot encode {type(record).__name__}")


# ------------------------------------
# Streams
# ------------------------------------
def read_records(
    lines: Iterable[str],
    from_fields: Callable[[List[str], Optional[str]], T],
) -> Iterator[T]:
    """
    Decode records from physical lines (a file opened with newline="").

    Quoted fields that span lines are reassembled. Blank lines are skipped.
    Any MalformedRecord raised is tagged with the 1-based line number.
    """
    reader = csv.reader(lines, strict=True)
    while True:
        try:
            values = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            raise MalformedRecord(f"unreadable CSV: {e}", line_number=reader.line_num) from e

        if not values or (len(values) == 1 and not values[0].strip()):
            continue

        try:
            yield from_fields(values, _join(values))
        except MalformedRecord as e:
            logger.error(f"Malformed record at line {reader.line_num}: {e}")
            raise MalformedRecord(str(e), line=e.line, line_number=reader.line_num) from e


def write_lines(records: Iterable[Union[Room, Reservation]]) -> str:
    """Render records as file content, one row per line."""
    return "".join(encode(r) + "\n" for r in records)
