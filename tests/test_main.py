"""
Scripted run of the operator console.
"""
import os
import tempfile
from datetime import date

from hotelres.adapters.flatfile import FlatFileReservationAdapter, FlatFileRoomAdapter
from hotelres.base_config import DEFAULT_ROOMS
from hotelres.main import OperatorConsole
from hotelres.services import BookingService, PaymentSimulator, RoomCatalog


def run_console(td: str, answers):
    rooms = FlatFileRoomAdapter(os.path.join(td, "rooms.csv"))
    rooms.init(DEFAULT_ROOMS)
    store = FlatFileReservationAdapter(os.path.join(td, "reservations.csv"))
    store.init()
    service = BookingService(RoomCatalog(rooms), store, PaymentSimulator(), today=lambda: date(2024, 2, 1))

    inputs = iter(answers)
    output = []

    def read(_prompt):
        try:
            return next(inputs)
        except StopIteration:
            raise EOFError from None

    OperatorConsole(service, read=read, write=output.append).run()
    return service, "\n".join(output)


class TestOperatorConsole:

    def test_book_then_cancel(self):
        with tempfile.TemporaryDirectory() as td:
            service, out = run_console(td, [
                "2", "2024-03-01", "2024-03-04", "deluxe", "3", "Ann Lee", "4111 1111 1111 1111",
                "3", "1001",
                "0",
            ])

            assert "Reservation CONFIRMED. Your Reservation ID is: 1001" in out
            assert "Refund successful" in out
            assert service.get_reservation(1001).is_cancelled()

    def test_errors_are_reported_and_loop_continues(self):
        with tempfile.TemporaryDirectory() as td:
            _, out = run_console(td, [
                "4", "1001",
                "9",
                "4", "abc",
                "0",
            ])

            assert "Error: Reservation 1001 not found" in out
            assert "Invalid choice." in out
            assert "Invalid number." in out
            assert out.endswith("Goodbye!")

    def test_invalid_date_is_reprompted(self):
        with tempfile.TemporaryDirectory() as td:
            _, out = run_console(td, ["1", "tomorrow", "2024-03-01", "2024-03-02", "", "0"])

            assert "Invalid date. Use YYYY-MM-DD." in out
            assert "ID:5 | Room:301 | SUITE" in out

    def test_end_of_input_mid_command_exits(self):
        with tempfile.TemporaryDirectory() as td:
            service, out = run_console(td, ["2", "2024-03-01", "2024-03-04"])

            assert out.endswith("Goodbye!")
            assert service.list_reservations() == []
