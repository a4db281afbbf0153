"""
Application lifespan handler.
Manages startup and shutdown events for the FastAPI application.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from shared.infrastructure.db import engine, SessionLocal
from shared.config.settings import settings
from shared.config.logging import setup_logging, api_logger as logger
from shared.infrastructure.events import build_notification_gateway
from rest_api.models import Base
from rest_api.seed import seed


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and shutdown.
    """
    setup_logging()

    # Refuse to start in production with unsafe settings
    config_errors = settings.validate_production_settings()
    if config_errors:
        for error in config_errors:
            logger.error("Configuration error", error=error)
        if settings.environment == "production":
            raise RuntimeError(
                f"Production configuration errors: {'; '.join(config_errors)}. "
                "Server will not start with unsafe configuration."
            )
        logger.warning("Running with development defaults")

    logger.info("Starting floor API", port=settings.rest_api_port, env=settings.environment)

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    if settings.seed_on_startup:
        with SessionLocal() as db:
            seed(db)

    app.state.notifier = build_notification_gateway(settings)
    logger.info("Notification gateway ready", backend=settings.notifications_backend)

    yield

    logger.info("Shutting down floor API")
    app.state.notifier.close()
    logger.info("Notification gateway closed")
