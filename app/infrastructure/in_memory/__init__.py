"""In-memory implementations for local runs and tests."""

from app.infrastructure.in_memory.booking_repo import InMemoryBookingRepo
from app.infrastructure.in_memory.hotel_inventory_repo import InMemoryHotelInventoryRepo
from app.infrastructure.in_memory.refund_gateway import StubRefundGateway as InMemoryRefundGateway
from app.infrastructure.in_memory.transaction_manager import NoopTransactionManager as InMemoryTransactionManager

__all__ = [
    # Repositories
    "InMemoryBookingRepo",
    "InMemoryHotelInventoryRepo",
    # Gateways
    "InMemoryRefundGateway",
    # Infrastructure
    "InMemoryTransactionManager",
]
