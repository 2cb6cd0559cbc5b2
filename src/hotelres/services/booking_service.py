from __future__ import annotations

import logging
from datetime import date
from typing import Callable, List, Optional, Protocol

from pydantic import BaseModel, Field, field_validator, model_validator

from hotelres.adapters.base import ReservationAdapter
from hotelres.exceptions import (
    HotelResError,
    InvalidRequest,
    NotFound,
    PaymentDeclined,
    RoomUnavailable,
)
from hotelres.models import Reservation, Room, RoomType
from hotelres.services.catalog_service import RoomCatalog
from hotelres.services.payment_service import PaymentResult

logger = logging.getLogger(__name__)

DEFAULT_REFUND_CUTOFF_DAYS = 2


class PaymentGateway(Protocol):
    def charge(self, card_number: Optional[str], amount: float) -> PaymentResult: ...
    def refund(self, original_txn_id: Optional[str], amount: float) -> PaymentResult: ...


# --- PYDANTIC INPUT SCHEMAS ---

class BookingRequest(BaseModel):
    """Booking parameters with enforced types and date order."""
    room_id: int = Field(description="Catalog room id")
    guest_name: str = Field(description="Guest full name")
    check_in: date = Field(description="Check-in date (YYYY-MM-DD)")
    check_out: date = Field(description="Check-out date (YYYY-MM-DD), after check-in")
    card_number: str = Field(description="16 digit card number, spaces allowed")

    @field_validator("guest_name")
    @classmethod
    def _guest_name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("guest name must not be blank")
        return value

    @field_validator("card_number")
    @classmethod
    def _strip_card_spaces(cls, value: str) -> str:
        return "".join(value.split())

    @model_validator(mode="after")
    def _check_out_after_check_in(self) -> BookingRequest:
        if self.check_out <= self.check_in:
            raise ValueError("check-out must be after check-in")
        return self


class BookingService:
    """
    Orchestrates search, booking and cancellation across the catalog, the
    reservation store and the payment gateway.

    A declined charge writes nothing; a failed refund leaves the reservation
    untouched.
    """

    def __init__(
        self,
        catalog: RoomCatalog,
        store: ReservationAdapter,
        payments: PaymentGateway,
        refund_cutoff_days: int = DEFAULT_REFUND_CUTOFF_DAYS,
        today: Optional[Callable[[], date]] = None,
    ):
        self.catalog = catalog
        self.store = store
        self.payments = payments
        self.refund_cutoff_days = refund_cutoff_days
        self._today = today or date.today

    # ------------------------------------
    # Queries
    # ------------------------------------
    def list_rooms(self) -> List[Room]:
        return self.catalog.all()

    def list_reservations(self) -> List[Reservation]:
        return self.store.load_all()

    def get_reservation(self, reservation_id: int) -> Reservation:
        reservation = self.store.find_by_id(reservation_id)
        if reservation is None:
            raise NotFound(f"Reservation {reservation_id} not found")
        return reservation

    def search(
        self,
        check_in: date,
        check_out: date,
        room_type: Optional[RoomType] = None,
    ) -> List[Room]:
        if check_out <= check_in:
            raise InvalidRequest("Check-out must be after check-in")
        return self.catalog.find_available(check_in, check_out, room_type, self.store.load_all())

    # ------------------------------------
    # Commands
    # ------------------------------------
    def book(self, request: BookingRequest) -> Reservation:
        room = self.catalog.by_id(request.room_id)
        if room is None:
            raise NotFound(f"Room {request.room_id} not found")

        if not self.catalog.is_available(room.id, request.check_in, request.check_out, self.store.load_all()):
            logger.warning(f"Room {room.id} not available for {request.check_in}..{request.check_out}")
            raise RoomUnavailable(f"Room {room.number} is not available for the selected dates")

        amount = self.catalog.quote(room, request.check_in, request.check_out)
        payment = self.payments.charge(request.card_number, amount)
        if not payment.success:
            logger.warning(f"Booking for room {room.id} aborted: {payment.message}")
            raise PaymentDeclined(f"Payment failed: {payment.message}", result=payment)

        try:
            reservation = self.store.create_if_available(
                room.id,
                request.guest_name,
                request.check_in,
                request.check_out,
                amount,
                payment.txn_id,
            )
        except HotelResError:
            # Charge went through but nothing was stored; give the money back.
            refund = self.payments.refund(payment.txn_id, amount)
            if not refund.success:
                logger.error(f"Could not refund charge {payment.txn_id}: {refund.message}")
            raise

        logger.info(f"Booking confirmed: {reservation.get_reference_code()} room {room.number}")
        return reservation

    def cancel(self, reservation_id: int, today: Optional[date] = None) -> Reservation:
        """
        Cancel a confirmed reservation.

        Cancelling at least refund_cutoff_days before check-in refunds the full
        amount; closer to check-in the reservation is cancelled without refund.
        If the refund is refused the cancellation is aborted. The status check,
        the refund and the rewrite run as one step in the store, so a
        reservation is refunded at most once.
        """
        today = today or self._today()

        def refund_for(reservation: Reservation) -> Optional[str]:
            days_before = (reservation.check_in - today).days
            if days_before < self.refund_cutoff_days:
                logger.info(
                    f"Reservation {reservation_id} cancelled {days_before} day(s) before check-in; no refund"
                )
                return None

            refund = self.payments.refund(reservation.payment_txn_id, reservation.total_amount)
            if not refund.success:
                logger.warning(f"Cancellation of {reservation_id} aborted: {refund.message}")
                raise PaymentDeclined(f"Refund failed: {refund.message}", result=refund)
            return refund.txn_id

        return self.store.cancel_with(reservation_id, refund_for)
