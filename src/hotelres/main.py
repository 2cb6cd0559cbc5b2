from __future__ import annotations
import logging
from datetime import date, datetime
from typing import Callable, Dict, Optional

from pydantic import ValidationError

from hotelres.config import get_config
from hotelres.exceptions import HotelResError
from hotelres.models import RoomType
from hotelres.services import BookingRequest, BookingService

logger = logging.getLogger(__name__)

MENU = """1) Search availability
2) Book a room
3) Cancel a reservation
4) View reservation details
5) List all rooms
6) List all reservations
0) Exit
"""


class OperatorConsole:
    """Line-based operator menu on top of BookingService."""

    def __init__(self, service: BookingService, currency: str = "₹",
                 read: Callable[[str], str] = input, write: Callable[[str], None] = print):
        self.service = service
        self.currency = currency
        self._read = read
        self._write = write

    # ------------------------------------
    # Prompts
    # ------------------------------------
    def _prompt_date(self, label: str) -> date:
        while True:
            raw = self._read(label).strip()
            try:
                return datetime.strptime(raw, "%Y-%m-%d").date()
            except ValueError:
                self._write("Invalid date. Use YYYY-MM-DD.")

    def _prompt_room_type(self) -> Optional[RoomType]:
        raw = self._read("Filter by type? (Enter for any) [STANDARD/DELUXE/SUITE]: ").strip()
        if not raw:
            return None
        try:
            return RoomType(raw.upper())
        except ValueError:
            self._write("Unknown type. Showing any type.")
            return None

    def _prompt_id(self, label: str) -> int:
        return int(self._read(label).strip())

    def _money(self, amount: float) -> str:
        return f"{self.currency}{amount:.2f}"

    # ------------------------------------
    # Commands
    # ------------------------------------
    def search(self) -> None:
        check_in = self._prompt_date("Enter check-in (YYYY-MM-DD): ")
        check_out = self._prompt_date("Enter check-out (YYYY-MM-DD): ")
        rooms = self.service.search(check_in, check_out, self._prompt_room_type())
        if not rooms:
            self._write("No rooms available for the selected criteria.\n")
            return
        self._write("Available rooms:")
        for r in rooms:
            self._write(f"- ID:{r.id} | Room:{r.number} | {r.type.value} | {self._money(r.price_per_night)}/night")
        self._write("")

    def book(self) -> None:
        check_in = self._prompt_date("Enter check-in (YYYY-MM-DD): ")
        check_out = self._prompt_date("Enter check-out (YYYY-MM-DD): ")
        rooms = self.service.search(check_in, check_out, self._prompt_room_type())
        if not rooms:
            self._write("No rooms available for the selected criteria.\n")
            return
        for r in rooms:
            self._write(f"- ID:{r.id} | Room:{r.number} | {r.type.value} | {self._money(r.price_per_night)}/night")

        request = BookingRequest(
            room_id=self._prompt_id("Enter room ID to book: "),
            guest_name=self._read("Guest name: "),
            check_in=check_in,
            check_out=check_out,
            card_number=self._read("Enter card number (simulated, 16 digits): "),
        )
        res = self.service.book(request)
        self._write(f"Total for {res.nights} nights: {self._money(res.total_amount)}")
        self._write(f"Payment successful, txn: {res.payment_txn_id}")
        self._write(f"Reservation CONFIRMED. Your Reservation ID is: {res.id}\n")

    def cancel(self) -> None:
        res = self.service.cancel(self._prompt_id("Enter Reservation ID to cancel: "))
        if res.refund_txn_id:
            self._write(f"Refund successful, txn: {res.refund_txn_id}")
        else:
            self._write("No refund as per policy (within cutoff of check-in).")
        self._write("Reservation cancelled.\n")

    def details(self) -> None:
        res = self.service.get_reservation(self._prompt_id("Enter Reservation ID: "))
        room = self.service.catalog.by_id(res.room_id)
        room_label = f"{room.number} ({room.type.value})" if room else f"#{res.room_id}"
        self._write("\n--- Reservation Details ---")
        self._write(f"Reservation ID: {res.id} ({res.get_reference_code()})")
        self._write(f"Guest: {res.guest_name}")
        self._write(f"Status: {res.status.value}")
        self._write(f"Room: {room_label}")
        self._write(f"Check-in: {res.check_in}")
        self._write(f"Check-out: {res.check_out}")
        self._write(
            f"Amount: {self._money(res.total_amount)} | Payment: {res.payment_status.value} "
            f"| Payment Txn: {res.payment_txn_id}"
        )
        if res.refund_txn_id:
            self._write(f"Refund Txn: {res.refund_txn_id}")
        self._write(f"Created: {res.created_at.isoformat()}")
        self._write("---------------------------\n")

    def list_rooms(self) -> None:
        self._write("\nRooms:")
        for r in self.service.list_rooms():
            self._write(f"ID:{r.id} | Room:{r.number} | {r.type.value} | {self._money(r.price_per_night)}/night")
        self._write("")

    def list_reservations(self) -> None:
        self._write("\nReservations:")
        for r in self.service.list_reservations():
            self._write(
                f"ID:{r.id} | Guest:{r.guest_name} | Room:{r.room_id} | {r.check_in} to {r.check_out} "
                f"| {r.status.value} | {self._money(r.total_amount)}"
            )
        self._write("")

    # ------------------------------------
    # Loop
    # ------------------------------------
    def run(self) -> None:
        commands: Dict[str, Callable[[], None]] = {
            "1": self.search,
            "2": self.book,
            "3": self.cancel,
            "4": self.details,
            "5": self.list_rooms,
            "6": self.list_reservations,
        }
        self._write("\n=== Welcome to the Hotel Reservation System ===\n")
        while True:
            self._write(MENU)
            try:
                choice = self._read("Choose: ").strip()
            except EOFError:
                choice = "0"
            if choice == "0":
                self._write("Goodbye!")
                return
            command = commands.get(choice)
            if command is None:
                self._write("Invalid choice.\n")
                continue
            try:
                command()
            except EOFError:
                self._write("\nGoodbye!")
                return
            except HotelResError as e:
                self._write(f"Error: {e}\n")
            except ValidationError as e:
                self._write(f"Invalid input: {e.errors()[0]['msg']}\n")
            except ValueError:
                self._write("Invalid number.\n")


def main():
    config = get_config()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, config.get_log_level(), logging.WARNING),
    )
    try:
        service = config.create_booking_service()
        OperatorConsole(service, currency=config.get_currency_symbol()).run()
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    except HotelResError as e:
        logger.error(f"System Error: {e}", exc_info=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
