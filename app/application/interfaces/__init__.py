"""Ports of the application layer."""

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.cache_backend import CacheBackend
from app.application.interfaces.clock import Clock, FakeClock, SystemClock
from app.application.interfaces.hotel_inventory_repo import HotelInventoryRepo
from app.application.interfaces.refund_gateway import RefundGateway, RefundResult
from app.application.interfaces.supplier_adapter import SupplierAdapter, SupplierRateCheck
from app.application.interfaces.transaction_manager import TransactionManager

__all__ = [
    # Repositories
    "BookingRepo",
    "HotelInventoryRepo",
    # Gateways
    "RefundGateway",
    "RefundResult",
    "SupplierAdapter",
    "SupplierRateCheck",
    # Infrastructure
    "CacheBackend",
    "TransactionManager",
    # Utilities
    "Clock",
    "SystemClock",
    "FakeClock",
]
