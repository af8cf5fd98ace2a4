"""
mybank/main.py

Purpose: Application entry point

- Builds the FastAPI app from explicit context objects
- Loads configuration and logging
- Registers API routes and the static asset mount
- Manages the database client lifecycle (startup/shutdown)
"""

import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles

from mybank.api import health, metrics as metrics_routes, users
from mybank.core.config import Settings, get_settings
from mybank.core.errors import add_exception_handlers
from mybank.core.exceptions import ConfigurationError
from mybank.core.logging import get_logger, setup_logging
from mybank.core.metrics import MetricsRegistry
from mybank.db.mongo import MongoSessionManager
from mybank.repositories.user_repository import UserRepository

logger = get_logger(__name__)

SLOW_REQUEST_SECONDS = 5.0


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Opens the pooled database client once and closes it on shutdown.
    """
    sessions: MongoSessionManager = app.state.sessions

    logger.info("🚀 Starting mybank service...")
    await sessions.connect()
    if sessions.is_connected:
        logger.info("🎉 mybank service started")
    else:
        logger.warning("⚠️ Serving without a database connection; data requests will fail")

    yield

    logger.info("🛑 Shutting down mybank service...")
    try:
        await sessions.close()
    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}", exc_info=True)


def create_app(
    settings: Optional[Settings] = None,
    metrics: Optional[MetricsRegistry] = None,
    sessions: Optional[MongoSessionManager] = None,
) -> FastAPI:
    """
    Builds the application.

    Args:
        settings: Configuration; loaded from the environment if omitted
        metrics: Metrics registry; a fresh one is created if omitted
        sessions: Session manager; built from settings if omitted

    Raises:
        ConfigurationError: If settings are missing or invalid
    """
    if settings is None:
        try:
            settings = get_settings()
        except ConfigurationError as e:
            logger.critical(f"Failed to start application: {e.message} {e.details}")
            raise

    setup_logging(settings)

    if metrics is None:
        metrics = MetricsRegistry(collect_default_metrics=settings.COLLECT_DEFAULT_METRICS)
    if sessions is None:
        sessions = MongoSessionManager(settings, metrics=metrics)

    app = FastAPI(
        title="mybank users",
        description="User list/add service with Prometheus metrics",
        version="1.0.0",
        lifespan=lifespan,
        debug=settings.DEBUG,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    app.state.settings = settings
    app.state.metrics = metrics
    app.state.sessions = sessions
    app.state.users = UserRepository(sessions, settings.USERS_COLLECTION)

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add processing time header to all responses."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)

        if process_time > SLOW_REQUEST_SECONDS:
            logger.warning(
                f"Slow request detected: {request.method} {request.url.path}",
                extra={"process_time": process_time}
            )

        return response

    add_exception_handlers(app)

    app.include_router(users.router, tags=["Users"])
    app.include_router(metrics_routes.router, tags=["Metrics"])
    app.include_router(health.router)

    # Mounted last so the API routes take precedence
    static_dir = Path(settings.STATIC_DIR)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    else:
        logger.debug(f"Static directory {static_dir} not found, skipping mount")

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "mybank.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )
