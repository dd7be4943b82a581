import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import settings
from .redis_client import redis_client
from .routers import bookings, settings as settings_router, slots
from .services.slots import (
    BookingCancelled,
    BookingNotFound,
    CatalogLookupMissing,
    ConfigurationUnavailable,
    SlotUnavailable,
)

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Home Services Scheduling API")

app.include_router(slots.router)
app.include_router(bookings.router)
app.include_router(settings_router.router)


# ===== Scheduling errors → HTTP =====

@app.exception_handler(ConfigurationUnavailable)
async def configuration_unavailable_handler(request: Request, exc: ConfigurationUnavailable):
    logger.error(f"{request.url.path}: {exc.reason}")
    return JSONResponse(
        status_code=503,
        content={"detail": "Scheduling temporarily unavailable"},
    )


@app.exception_handler(CatalogLookupMissing)
async def catalog_lookup_missing_handler(request: Request, exc: CatalogLookupMissing):
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "service_id": exc.service_id},
    )


@app.exception_handler(BookingNotFound)
async def booking_not_found_handler(request: Request, exc: BookingNotFound):
    return JSONResponse(status_code=404, content={"detail": "Not found"})


@app.exception_handler(BookingCancelled)
async def booking_cancelled_handler(request: Request, exc: BookingCancelled):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(SlotUnavailable)
async def slot_unavailable_handler(request: Request, exc: SlotUnavailable):
    logger.info(f"Commit rejected: {exc}")
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.get("/health")
def health():
    return {"redis": redis_client.ping()}
