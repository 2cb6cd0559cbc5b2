from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional


def dates_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """
    Half-open overlap test between [a_start, a_end) and [b_start, b_end).

    A range with no positive duration overlaps nothing. Touching ranges
    (one ends the day the other starts) do not overlap.
    """
    if a_start >= a_end or b_start >= b_end:
        return False
    return a_start < b_end and b_start < a_end


class ReservationStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


class PaymentStatus(str, Enum):
    PAID = "PAID"
    REFUNDED = "REFUNDED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class Reservation:
    """A single booking of one room for a half-open date range [check_in, check_out)."""

    # Required fields
    id: int
    room_id: int
    guest_name: str
    check_in: date
    check_out: date
    total_amount: float
    created_at: datetime

    # Payment and lifecycle
    payment_txn_id: Optional[str] = field(default=None)
    payment_status: PaymentStatus = field(default=PaymentStatus.PAID)
    status: ReservationStatus = field(default=ReservationStatus.CONFIRMED)
    refund_txn_id: Optional[str] = field(default=None)

    # ------------------------------------
    # Helpers
    # ------------------------------------

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def get_reference_code(self) -> str:
        """Reference code in 'RSV-001001' form."""
        return f"RSV-{self.id:06d}"

    def is_confirmed(self) -> bool:
        return self.status is ReservationStatus.CONFIRMED

    def is_cancelled(self) -> bool:
        return self.status is ReservationStatus.CANCELLED

    def blocks(self, room_id: int, check_in: date, check_out: date) -> bool:
        """True if this reservation holds room_id for any night in [check_in, check_out)."""
        if self.is_cancelled() or self.room_id != room_id:
            return False
        return dates_overlap(check_in, check_out, self.check_in, self.check_out)

    def cancelled(self, refund_txn_id: Optional[str] = None) -> Reservation:
        """
        Return a cancelled copy of this reservation.

        Only status, payment_status and refund_txn_id change; payment status
        moves to REFUNDED only when a refund transaction is supplied.
        """
        return replace(
            self,
            status=ReservationStatus.CANCELLED,
            payment_status=PaymentStatus.REFUNDED if refund_txn_id else self.payment_status,
            refund_txn_id=refund_txn_id if refund_txn_id else self.refund_txn_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "reference_code": self.get_reference_code(),
            "room_id": self.room_id,
            "guest_name": self.guest_name,
            "check_in": self.check_in.isoformat(),
            "check_out": self.check_out.isoformat(),
            "total_amount": self.total_amount,
            "created_at": self.created_at.isoformat(),
            "payment_txn_id": self.payment_txn_id,
            "payment_status": self.payment_status.value,
            "status": self.status.value,
            "refund_txn_id": self.refund_txn_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Reservation:
        data = data.copy()
        for key in ("check_in", "check_out"):
            if isinstance(data.get(key), str):
                data[key] = date.fromisoformat(data[key])
        if isinstance(data.get("created_at"), str):
            data["created_at"] = datetime.fromisoformat(data["created_at"])
        if "payment_status" in data:
            data["payment_status"] = PaymentStatus(data["payment_status"])
        if "status" in data:
            data["status"] = ReservationStatus(data["status"])

        field_names = {f.name for f in fields(cls)}
        filtered_data = {k: v for k, v in data.items() if k in field_names}

        return cls(**filtered_data)
