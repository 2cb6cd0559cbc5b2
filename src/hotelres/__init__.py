"""hotelres - flat-file hotel reservation engine"""

__version__ = "0.1.0"

# Exceptions
from .exceptions import (
    HotelResError,
    ConfigurationError,
    StorageUnavailable,
    MalformedRecord,
    NotFound,
    PaymentDeclined,
    RoomUnavailable,
    AlreadyCancelled,
    InvalidRequest,
)

# Models
from .models import Room, RoomType, Reservation, ReservationStatus, PaymentStatus

# Adapters
from .adapters.base import ReservationAdapter, RoomAdapter
from .adapters.flatfile import FlatFileReservationAdapter, FlatFileRoomAdapter

# Services
from .services import (
    BookingRequest,
    BookingService,
    PaymentResult,
    PaymentSimulator,
    RoomCatalog,
)

# Config management
from .base_config import HotelResConfig, DEFAULT_ROOMS
from .config import get_config, set_config

__all__ = [
    # Version
    "__version__",

    # Exceptions
    "HotelResError",
    "ConfigurationError",
    "StorageUnavailable",
    "MalformedRecord",
    "NotFound",
    "PaymentDeclined",
    "RoomUnavailable",
    "AlreadyCancelled",
    "InvalidRequest",

    # Models
    "Room",
    "RoomType",
    "Reservation",
    "ReservationStatus",
    "PaymentStatus",

    # Adapters
    "ReservationAdapter",
    "RoomAdapter",
    "FlatFileReservationAdapter",
    "FlatFileRoomAdapter",

    # Services
    "BookingRequest",
    "BookingService",
    "PaymentResult",
    "PaymentSimulator",
    "RoomCatalog",

    # Config
    "HotelResConfig",
    "DEFAULT_ROOMS",
    "get_config",
    "set_config",
]
