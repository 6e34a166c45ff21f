"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .database import init_db, close_db
from .errors import DomainError
from .routers import (
    monitors_router,
    groups_router,
    channels_router,
    subscriptions_router,
    incidents_router,
    status_pages_router,
    status_router,
    public_router,
    push_router,
    probes_router,
    badges_router,
)
from .services.scheduler import scheduler_service

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    logger.info("Starting PulseWatch")

    await init_db()
    logger.info("Database initialized")

    if settings.scheduler_enabled:
        scheduler_service.start()

    yield

    scheduler_service.stop()
    await close_db()
    logger.info("Shutdown complete")


async def domain_error_handler(request: Request, exc: DomainError):
    """Map domain errors to their HTTP status with a ``detail`` body."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.debug(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="PulseWatch",
        description="Uptime monitoring - monitors, incidents and public status pages",
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS middleware for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DomainError, domain_error_handler)

    app.include_router(monitors_router)
    app.include_router(groups_router)
    app.include_router(channels_router)
    app.include_router(subscriptions_router)
    app.include_router(incidents_router)
    app.include_router(status_pages_router)
    app.include_router(status_router)
    app.include_router(public_router)
    app.include_router(push_router)
    app.include_router(probes_router)
    app.include_router(badges_router)

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "scheduler": scheduler_service.running,
        }

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.web_port)
