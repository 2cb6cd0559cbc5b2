from .catalog_service import RoomCatalog
from .payment_service import PaymentResult, PaymentSimulator
from .booking_service import BookingRequest, BookingService, PaymentGateway

__all__ = [
    "RoomCatalog",
    "PaymentResult",
    "PaymentSimulator",
    "BookingRequest",
    "BookingService",
    "PaymentGateway",
]
