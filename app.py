"""
app.py — FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires the repository and optimization service, registers routers, and
runs startup initialization.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from booking_optimizer.controllers.booking_controller import (
    register_exception_handlers,
    router as booking_router,
)
from booking_optimizer.repository.data_repository import DataRepository
from booking_optimizer.services.optimization_service import BookingOptimizationService
from booking_optimizer.utils.config import Settings, get_settings
from booking_optimizer.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Every dependency is created here and exposed on app.state, so controllers
    resolve services without module-level singletons.
    """
    resolved_settings = settings or get_settings()

    # --- Repository (SQLite connection factory; also the availability source) ---
    repository = DataRepository(resolved_settings)

    # --- Services ---
    optimization_service = BookingOptimizationService(
        repository=repository,
        settings=resolved_settings,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app, resolved_settings)
        yield

    app = FastAPI(
        title=resolved_settings.app_name,
        version=resolved_settings.app_version,
        lifespan=lifespan,
    )

    app.include_router(booking_router)
    register_exception_handlers(app)

    app.state.repository = repository
    app.state.optimization_service = optimization_service

    return app


def _startup(app: FastAPI, settings: Settings) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    Schema must exist before the optional demo inventory is seeded.
    """
    repository: DataRepository = app.state.repository

    logger.info("Startup: initializing database schema")
    repository.initialize_database()

    if settings.seed_demo_data:
        logger.info("Startup: seeding demo hotels, rooms and bookings (skipped if present)")
        repository.seed_demo_data()

    logger.info("Startup complete | rooms=%s", repository.count_rooms())


# Module-level app object for uvicorn
app = create_app()
