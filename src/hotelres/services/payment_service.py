"""
Simulated payment gateway.

Charges are accepted for positive amounts on 16-digit card numbers that pass
the Luhn checksum. Refunds are accepted for any non-empty original
transaction id. Nothing is recorded between calls.
"""
from __future__ import annotations

import logging
import random
import re
import time
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)

_CARD_PATTERN = re.compile(r"[0-9]{16}")


@dataclass(frozen=True)
class PaymentResult:
    success: bool
    txn_id: Optional[str]
    message: str


def luhn_valid(digits: str) -> bool:
    """Luhn checksum over a string of decimal digits."""
    total = 0
    for i, ch in enumerate(reversed(digits)):
        n = ord(ch) - ord("0")
        if i % 2 == 1:
            n *= 2
            if n > 9:
                n -= 9
        total += n
    return total % 10 == 0


def is_plausible_card(card_number: Optional[str]) -> bool:
    if card_number is None or not _CARD_PATTERN.fullmatch(card_number):
        return False
    return luhn_valid(card_number)


class PaymentSimulator:
    """Stand-in for a card processor, exposing charge and refund."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock_ms: Optional[Callable[[], int]] = None,
    ):
        self._rng = rng or random.Random()
        self._clock_ms = clock_ms or (lambda: time.time_ns() // 1_000_000)

    def charge(self, card_number: Optional[str], amount: float) -> PaymentResult:
        if amount <= 0:
            logger.warning(f"Charge rejected: invalid amount {amount}")
            return PaymentResult(False, None, "Invalid amount")

        card = re.sub(r"\s+", "", card_number) if card_number else card_number
        if not is_plausible_card(card):
            logger.warning("Charge rejected: card declined")
            return PaymentResult(False, None, "Card declined")

        txn = self._new_txn_id("PAY")
        logger.info(f"Charged {amount:.2f}, txn {txn}")
        return PaymentResult(True, txn, f"Charged {amount:.2f}")

    def refund(self, original_txn_id: Optional[str], amount: float) -> PaymentResult:
        if not original_txn_id:
            logger.warning("Refund rejected: original payment missing")
            return PaymentResult(False, None, "Original payment missing")

        txn = self._new_txn_id("RFD")
        logger.info(f"Refunded {amount:.2f} against {original_txn_id}, txn {txn}")
        return PaymentResult(True, txn, f"Refunded {amount:.2f}")

    def _new_txn_id(self, prefix: str) -> str:
        return f"{prefix}-{100000 + self._rng.randrange(900000)}-{self._clock_ms()}"
