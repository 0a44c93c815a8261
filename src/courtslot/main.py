import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

import courtslot.models  # noqa: F401  registers every table on Base.metadata
from courtslot.api.routes.availability import router as availability_router
from courtslot.api.routes.bookings import router as bookings_router
from courtslot.api.routes.courts import router as courts_router
from courtslot.config import get_settings
from courtslot.database import Base, engine
from courtslot.errors import BookingError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Create tables on startup (dev convenience; migrations for production)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(
        title="CourtSlot",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_exception_handler(BookingError, booking_error_handler)  # type: ignore[arg-type]

    app.include_router(availability_router)
    app.include_router(bookings_router)
    app.include_router(courts_router)

    @app.get("/api/system/status")
    async def system_status() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
