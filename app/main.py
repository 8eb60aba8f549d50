import logging
import uvicorn
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from app.config import HOST, LOG_LEVEL, PORT
from app.db import init_database
from app.errors import BookingError, StorageUnavailable
from app.routers import admin, bookings, rooms

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    "lifespan for initing database"
    init_database()
    yield


app = FastAPI(
    lifespan=lifespan,
    title="Room booker",
    description="Meeting room booking with an approval and reschedule workflow, based on FastAPI.",
    version="0.1.0",
    license_info={
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT",
    },
)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    logger.debug(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})


@app.exception_handler(StorageUnavailable)
async def storage_error_handler(request: Request, exc: StorageUnavailable):
    logger.error(f"{request.method} {request.url.path} failed: storage unavailable")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": exc.code, "message": exc.message, "details": None}},
        headers={"Retry-After": "1"},
    )


app.include_router(rooms.router)
app.include_router(bookings.router)
app.include_router(admin.router)


def run():
    """Serve the API with uvicorn."""
    uvicorn.run("app.main:app", host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
