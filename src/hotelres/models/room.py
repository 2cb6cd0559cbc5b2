from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class RoomType(str, Enum):
    STANDARD = "STANDARD"
    DELUXE = "DELUXE"
    SUITE = "SUITE"


@dataclass(frozen=True)
class Room:
    """Hotel room from the static catalog. Never mutated after seeding."""

    id: int
    number: str
    type: RoomType
    price_per_night: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "number": self.number,
            "type": self.type.value,
            "price_per_night": self.price_per_night,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Room:
        return cls(
            id=int(data["id"]),
            number=str(data["number"]),
            type=RoomType(data["type"]),
            price_per_night=float(data["price_per_night"]),
        )
