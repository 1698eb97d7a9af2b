"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from zoneinfo import ZoneInfoNotFoundError

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from salatuk import __version__
from salatuk.api.dependencies import initialize_app_state, shutdown_app_state
from salatuk.api.routes import router as api_router
from salatuk.domain.errors import InvalidCoordinateError, PrayerTimesUncomputableError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    logger.info("Starting Salatuk...")

    settings_path = getattr(app.state, "settings_path", None)
    state = await initialize_app_state(settings_path=settings_path)

    state.notification_center.start()
    # The persisted coordinate (or the default one) serves as the first fix
    state.clock_service.update_location(state.settings.location)
    state.clock_task = asyncio.create_task(state.clock_service.run())

    logger.info("Salatuk ready.")

    yield

    # Shutdown
    logger.info("Shutting down Salatuk...")
    await shutdown_app_state()
    logger.info("Salatuk stopped.")


async def _unprocessable(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc)},
    )


def create_app(settings_path: Path | None = None) -> FastAPI:
    """
    Create FastAPI application.

    Args:
        settings_path: Settings file path

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Salatuk",
        description="Prayer times, qibla direction and azan notifications",
        version=__version__,
        lifespan=lifespan,
    )

    # Store config in app state
    app.state.settings_path = settings_path

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PrayerTimesUncomputableError, _unprocessable)
    app.add_exception_handler(InvalidCoordinateError, _unprocessable)
    app.add_exception_handler(ZoneInfoNotFoundError, _unprocessable)

    # API routes
    app.include_router(api_router, prefix="/api")

    # Health check
    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app
