# slotkeeper/main.py
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI

from .core.config import is_running_tests, settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION
from .database import init_db
from .errors import register_error_handlers
from .routes import health
from .routes.v1 import bookings as bookings_v1

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{settings.brand_name} API starting up...")

    if is_running_tests():
        logger.info("Running under pytest (test mode active)")

    if settings.create_tables_on_startup:
        init_db()
        logger.info("Database tables ensured")

    yield

    logger.info(f"{settings.brand_name} API shutting down...")


def create_app() -> FastAPI:
    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=app_lifespan,
    )

    # Register unified error envelope handlers
    register_error_handlers(app)

    # Create API v1 router
    api_v1 = APIRouter(prefix="/v1")
    api_v1.include_router(bookings_v1.router, prefix="/bookings")

    app.include_router(health.router)
    app.include_router(api_v1)
    return app


app = create_app()
