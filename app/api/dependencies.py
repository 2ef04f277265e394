from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AsyncSessionLocal
from app.application.interfaces.clock import Clock, SystemClock
from app.application.use_cases.build_booking_selection import BuildBookingSelectionUseCase
from app.application.use_cases.cancel_booking import CancelBookingUseCase
from app.application.use_cases.prebook_rate import PrebookRateUseCase
from app.config import Settings, get_settings
from app.domain.entities.booking import booking_from_mapping
from app.infrastructure.cache.rate_limit import RateLimiter
from app.infrastructure.cache.shared_cache import SharedCache, get_shared_cache
from app.infrastructure.db.repositories.booking_repo_sql import BookingRepoSQL
from app.infrastructure.db.repositories.hotel_inventory_repo_sql import HotelInventoryRepoSQL
from app.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from app.infrastructure.gateways.registry import SupplierRegistry
from app.infrastructure.gateways.stripe_refund_gateway import StripeRefundGateway
from app.infrastructure.in_memory.booking_repo import InMemoryBookingRepo
from app.infrastructure.in_memory.demo_catalog import demo_bookings
from app.infrastructure.in_memory.hotel_inventory_repo import InMemoryHotelInventoryRepo
from app.infrastructure.in_memory.refund_gateway import StubRefundGateway
from app.infrastructure.in_memory.transaction_manager import NoopTransactionManager


async def get_session(settings: Settings = Depends(get_settings)) -> AsyncSession | None:
    if settings.use_in_memory:
        yield None
        return
    async with AsyncSessionLocal() as session:
        yield session


@lru_cache(maxsize=1)
def _in_memory_bundle():
    return {
        "inventory_repo": InMemoryHotelInventoryRepo(),
        "booking_repo": InMemoryBookingRepo(booking_from_mapping(row) for row in demo_bookings()),
        "refund_gateway": StubRefundGateway(),
        "tx_manager": NoopTransactionManager(),
    }


def get_clock() -> Clock:
    return SystemClock()


def get_cache() -> SharedCache:
    return get_shared_cache()


def get_rate_limiter(cache: SharedCache = Depends(get_cache)) -> RateLimiter:
    return RateLimiter(cache)


def get_registry(
    settings: Settings = Depends(get_settings),
    session: AsyncSession | None = Depends(get_session),
    cache: SharedCache = Depends(get_cache),
    clock: Clock = Depends(get_clock),
) -> SupplierRegistry:
    if settings.use_in_memory:
        inventory_repo = _in_memory_bundle()["inventory_repo"]
    elif session is None:
        raise RuntimeError("DB session not available")
    else:
        inventory_repo = HotelInventoryRepoSQL(session)
    return SupplierRegistry(settings, cache, inventory_repo, clock=clock)


def get_use_cases(
    settings: Settings = Depends(get_settings),
    session: AsyncSession | None = Depends(get_session),
    registry: SupplierRegistry = Depends(get_registry),
    clock: Clock = Depends(get_clock),
):
    if settings.use_in_memory:
        bundle = _in_memory_bundle()
        booking_repo = bundle["booking_repo"]
        refund_gateway = bundle["refund_gateway"]
        tx_manager = bundle["tx_manager"]
    elif session is None:
        raise RuntimeError("DB session not available")
    else:
        booking_repo = BookingRepoSQL(session)
        refund_gateway = StripeRefundGateway(api_key=settings.stripe_api_key)
        tx_manager = SQLAlchemyTransactionManager(session)

    return {
        "registry": registry,
        "prebook": PrebookRateUseCase(registry=registry, settings=settings),
        "booking_selection": BuildBookingSelectionUseCase(registry=registry, clock=clock),
        "cancel_booking": CancelBookingUseCase(
            booking_repo=booking_repo,
            refund_gateway=refund_gateway,
            transaction_manager=tx_manager,
            settings=settings,
            clock=clock,
        ),
    }
