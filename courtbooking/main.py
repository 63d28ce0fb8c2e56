import asyncio
import logging

from fastapi import FastAPI
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware

from courtbooking.core.config import settings
from courtbooking.db.init_db import create_database
from courtbooking.db.base import Base
from courtbooking.db.session import engine, SessionLocal
from courtbooking.api.v1.router import api_router
from courtbooking.services.events import (
    BOOKING_CANCELLED,
    BOOKING_COMPLETED,
    BOOKING_CONFIRMED,
    subscribe,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _log_booking_event(event: dict) -> None:
    logger.info(
        "%s: %s court=%s %s %s-%s",
        event["type"], event["booking_number"], event["court_id"],
        event["date"], event["start_time"], event["end_time"],
    )


for _event_type in (BOOKING_CONFIRMED, BOOKING_CANCELLED, BOOKING_COMPLETED):
    subscribe(_event_type, _log_booking_event)


def _run_completion_sweep() -> int:
    from courtbooking.services.bookings import complete_past_bookings

    db = SessionLocal()
    try:
        return complete_past_bookings(db)
    finally:
        db.close()


async def _completion_loop(interval: int) -> None:
    """Background task: mark finished bookings as completed every ``interval`` seconds."""
    while True:
        try:
            count = await asyncio.to_thread(_run_completion_sweep)
            if count:
                logger.info("Marked %d booking(s) as completed.", count)
        except Exception:
            logger.exception("Error during booking completion sweep.")
        await asyncio.sleep(interval)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Ensure DB exists and create tables
    create_database()
    Base.metadata.create_all(bind=engine)

    sweep_task = None
    if settings.COMPLETION_CHECK_INTERVAL_SECONDS > 0:
        sweep_task = asyncio.create_task(_completion_loop(settings.COMPLETION_CHECK_INTERVAL_SECONDS))
    yield

    # Shutdown: cancel background task
    if sweep_task:
        sweep_task.cancel()
        try:
            await sweep_task
        except asyncio.CancelledError:
            pass


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

# Set all CORS enabled origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
def read_root():
    return {"service": settings.PROJECT_NAME}


@app.get("/health")
def health():
    return {"status": "ok"}
