"""
End-to-end tests for BookingService: search, book and cancel over real
flat files, with the payment simulator or a scripted gateway.
"""
import os
import tempfile
import threading
import time
from datetime import date, datetime

import pytest
from pydantic import ValidationError

from hotelres.adapters.flatfile import FlatFileReservationAdapter, FlatFileRoomAdapter
from hotelres.base_config import DEFAULT_ROOMS
from hotelres.exceptions import (
    AlreadyCancelled,
    InvalidRequest,
    NotFound,
    PaymentDeclined,
    RoomUnavailable,
)
from hotelres.models import PaymentStatus, ReservationStatus, RoomType
from hotelres.services import BookingRequest, BookingService, PaymentResult, PaymentSimulator, RoomCatalog

VALID_CARD = "4111111111111111"
CHECK_IN = date(2024, 3, 1)
CHECK_OUT = date(2024, 3, 4)


# ============================================================================
# Test Fixtures and Helpers
# ============================================================================

class ScriptedGateway:
    """Payment gateway double that records calls and can be told to fail."""

    def __init__(self, charge_ok=True, refund_ok=True, on_charge=None, on_refund=None):
        self.charge_ok = charge_ok
        self.refund_ok = refund_ok
        self.on_charge = on_charge
        self.on_refund = on_refund
        self.charges = []
        self.refunds = []

    def charge(self, card_number, amount):
        self.charges.append((card_number, amount))
        if self.on_charge:
            self.on_charge()
        if not self.charge_ok:
            return PaymentResult(False, None, "Card declined")
        return PaymentResult(True, f"PAY-{len(self.charges)}", "ok")

    def refund(self, original_txn_id, amount):
        self.refunds.append((original_txn_id, amount))
        if self.on_refund:
            self.on_refund()
        if not self.refund_ok:
            return PaymentResult(False, None, "Gateway offline")
        return PaymentResult(True, f"RFD-{len(self.refunds)}", "ok")


def setup_service(payments=None):
    td = tempfile.TemporaryDirectory()
    rooms = FlatFileRoomAdapter(os.path.join(td.name, "rooms.csv"))
    rooms.init(DEFAULT_ROOMS)
    store = FlatFileReservationAdapter(
        os.path.join(td.name, "reservations.csv"),
        clock=lambda: datetime(2024, 2, 1, 12, 0),
    )
    store.init()
    service = BookingService(
        catalog=RoomCatalog(rooms),
        store=store,
        payments=payments or PaymentSimulator(),
        today=lambda: date(2024, 2, 1),
    )
    return td, service


def request(room_id=3, guest="Ann Lee", check_in=CHECK_IN, check_out=CHECK_OUT, card=VALID_CARD):
    return BookingRequest(
        room_id=room_id,
        guest_name=guest,
        check_in=check_in,
        check_out=check_out,
        card_number=card,
    )


# ============================================================================
# Booking
# ============================================================================

class TestBook:

    def test_end_to_end_booking(self):
        td, service = setup_service()
        try:
            res = service.book(request())

            assert res.id == 1001
            assert res.status is ReservationStatus.CONFIRMED
            assert res.payment_status is PaymentStatus.PAID
            assert res.total_amount == 11997.0
            assert res.payment_txn_id.startswith("PAY-")
            assert res.nights == 3

            deluxe = service.search(CHECK_IN, CHECK_OUT, RoomType.DELUXE)
            assert [r.id for r in deluxe] == [4]
            assert 3 not in [r.id for r in service.search(CHECK_IN, CHECK_OUT)]
        finally:
            td.cleanup()

    def test_declined_card_writes_nothing(self):
        td, service = setup_service()
        try:
            with pytest.raises(PaymentDeclined):
                service.book(request(card="4111111111111112"))
            assert service.list_reservations() == []
            assert os.path.getsize(service.store.path) == 0
        finally:
            td.cleanup()

    def test_unknown_room(self):
        td, service = setup_service()
        try:
            with pytest.raises(NotFound):
                service.book(request(room_id=77))
        finally:
            td.cleanup()

    def test_unavailable_room_is_not_charged(self):
        gateway = ScriptedGateway()
        td, service = setup_service(gateway)
        try:
            service.book(request())
            with pytest.raises(RoomUnavailable):
                service.book(request(guest="Bob", check_in=date(2024, 3, 3), check_out=date(2024, 3, 6)))
            assert len(gateway.charges) == 1
        finally:
            td.cleanup()

    def test_back_to_back_bookings(self):
        td, service = setup_service()
        try:
            service.book(request(check_in=date(2024, 1, 10), check_out=date(2024, 1, 15)))
            second = service.book(request(guest="Bob", check_in=date(2024, 1, 15), check_out=date(2024, 1, 20)))
            assert second.id == 1002
        finally:
            td.cleanup()

    def test_lost_race_refunds_the_charge(self):
        holder = {}

        def competing_booking():
            # Another caller grabs the room between availability check and commit.
            holder["service"].store.create(3, "Racer", CHECK_IN, CHECK_OUT, 1.0, "PAY-X")

        gateway = ScriptedGateway(on_charge=competing_booking)
        td, service = setup_service(gateway)
        holder["service"] = service
        try:
            with pytest.raises(RoomUnavailable):
                service.book(request())
            assert gateway.refunds == [("PAY-1", 11997.0)]
            assert [r.guest_name for r in service.list_reservations()] == ["Racer"]
        finally:
            td.cleanup()


class TestBookingRequest:

    def test_check_out_must_follow_check_in(self):
        with pytest.raises(ValidationError):
            request(check_in=CHECK_OUT, check_out=CHECK_IN)
        with pytest.raises(ValidationError):
            request(check_in=CHECK_IN, check_out=CHECK_IN)

    def test_blank_guest_name(self):
        with pytest.raises(ValidationError):
            request(guest="   ")

    def test_normalises_inputs(self):
        req = BookingRequest(
            room_id="3",
            guest_name="  Ann Lee ",
            check_in="2024-03-01",
            check_out="2024-03-04",
            card_number="4111 1111 1111 1111",
        )
        assert req.room_id == 3
        assert req.guest_name == "Ann Lee"
        assert req.check_in == CHECK_IN
        assert req.card_number == VALID_CARD


class TestSearch:

    def test_invalid_range(self):
        td, service = setup_service()
        try:
            with pytest.raises(InvalidRequest):
                service.search(CHECK_OUT, CHECK_IN)
        finally:
            td.cleanup()


# ============================================================================
# Cancellation
# ============================================================================

class TestCancel:

    def test_refundable_cancellation_frees_room(self):
        td, service = setup_service()
        try:
            res = service.book(request())
            cancelled = service.cancel(res.id, today=date(2024, 2, 20))

            assert cancelled.status is ReservationStatus.CANCELLED
            assert cancelled.payment_status is PaymentStatus.REFUNDED
            assert cancelled.refund_txn_id.startswith("RFD-")
            assert service.get_reservation(res.id) == cancelled
            assert 3 in [r.id for r in service.search(CHECK_IN, CHECK_OUT, RoomType.DELUXE)]
        finally:
            td.cleanup()

    def test_exactly_cutoff_days_is_refunded(self):
        td, service = setup_service()
        try:
            res = service.book(request())
            cancelled = service.cancel(res.id, today=date(2024, 2, 28))
            assert cancelled.payment_status is PaymentStatus.REFUNDED
        finally:
            td.cleanup()

    def test_late_cancellation_is_not_refunded(self):
        gateway = ScriptedGateway()
        td, service = setup_service(gateway)
        try:
            res = service.book(request())
            cancelled = service.cancel(res.id, today=date(2024, 2, 29))

            assert cancelled.status is ReservationStatus.CANCELLED
            assert cancelled.payment_status is PaymentStatus.PAID
            assert cancelled.refund_txn_id is None
            assert gateway.refunds == []
        finally:
            td.cleanup()

    def test_uses_service_clock_by_default(self):
        td, service = setup_service()
        try:
            res = service.book(request())
            # Service "today" is 2024-02-01, well ahead of check-in.
            assert service.cancel(res.id).payment_status is PaymentStatus.REFUNDED
        finally:
            td.cleanup()

    def test_failed_refund_aborts_cancellation(self):
        gateway = ScriptedGateway(refund_ok=False)
        td, service = setup_service(gateway)
        try:
            res = service.book(request())
            with pytest.raises(PaymentDeclined):
                service.cancel(res.id, today=date(2024, 2, 20))
            assert service.get_reservation(res.id) == res
        finally:
            td.cleanup()

    def test_cancel_twice(self):
        td, service = setup_service()
        try:
            res = service.book(request())
            service.cancel(res.id)
            with pytest.raises(AlreadyCancelled):
                service.cancel(res.id)
        finally:
            td.cleanup()

    def test_cancel_unknown(self):
        td, service = setup_service()
        try:
            with pytest.raises(NotFound):
                service.cancel(4040)
        finally:
            td.cleanup()

    def test_concurrent_cancels_refund_once(self):
        gateway = ScriptedGateway(on_refund=lambda: time.sleep(0.2))
        td, service = setup_service(gateway)
        try:
            res = service.book(request())
            outcomes = []
            lock = threading.Lock()

            def worker():
                try:
                    service.cancel(res.id, today=date(2024, 2, 20))
                    outcome = "cancelled"
                except AlreadyCancelled:
                    outcome = "already"
                with lock:
                    outcomes.append(outcome)

            threads = [threading.Thread(target=worker) for _ in range(2)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

            assert sorted(outcomes) == ["already", "cancelled"]
            assert len(gateway.refunds) == 1
            assert service.get_reservation(res.id).refund_txn_id == "RFD-1"
        finally:
            td.cleanup()
