"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import init_db, close_db
from .routers import (
    pensions_router,
    notification_settings_router,
    activity_router,
    devices_router,
    notifications_router,
)
from .services.push_sender import push_sender_service, PushConfig
from .services.scheduler import scheduler_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logger.info("Starting Pension Notifier")

    await init_db()
    logger.info("Database initialized")

    push_sender_service.configure(PushConfig(
        enabled=settings.push_enabled,
        credentials_path=settings.firebase_credentials_path,
    ))

    if settings.scheduler_enabled:
        scheduler_service.start()

    yield

    scheduler_service.stop()
    await close_db()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Pension Notifier",
        description="Pension contract tracking with expiry push notifications",
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS middleware for the web client
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(pensions_router)
    app.include_router(notification_settings_router)
    app.include_router(activity_router)
    app.include_router(devices_router)
    app.include_router(notifications_router)

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "push_configured": push_sender_service.is_configured,
        }

    return app


# Create the application instance
app = create_app()


def run():
    """Serve the API and the daily scheduler."""
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.web_port, log_level="info")
