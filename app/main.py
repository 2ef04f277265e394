import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.deps import AsyncSessionLocal, engine
from app.api.routers.bookings import router as bookings_router
from app.api.routers.health import router as health_router
from app.api.routers.hotels import router as hotels_router
from app.api.routers.prebook import router as prebook_router
from app.config import get_settings
from app.infrastructure.db.engine import create_schema, session_scope
from app.infrastructure.db.seed import seed_demo_catalog

# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    # Initialize DB tables (for dev/demo purposes)
    await create_schema(engine)
    if settings.seed_demo_data and not settings.use_in_memory:
        async with session_scope(AsyncSessionLocal) as session:
            await seed_demo_catalog(session)
    logger.info(
        "Hotel inventory API started",
        extra={"use_in_memory": settings.use_in_memory, "default_supplier": settings.default_supplier},
    )
    yield
    # Cleanup
    await engine.dispose()


app = FastAPI(
    title="Hotel Inventory API",
    version="0.1.0",
    lifespan=lifespan,
)


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler to prevent stack trace exposure to clients.
    All unhandled exceptions are logged internally and return a generic error message.
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception occurred",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "method": request.method,
            "client_host": request.client.host if request.client else None,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "message": "An unexpected error occurred. Please contact support with the error_id if the issue persists.",
        },
    )


app.include_router(health_router, tags=["Health"])
app.include_router(hotels_router, prefix="/api/v1", tags=["Hotels"])
app.include_router(prebook_router, prefix="/api/v1", tags=["Prebook"])
app.include_router(bookings_router, prefix="/api/v1", tags=["Bookings"])
