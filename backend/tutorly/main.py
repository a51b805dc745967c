# backend/tutorly/main.py
"""
Application factory for the Tutorly scheduling API.

Run with ``uvicorn --factory tutorly.main:create_app``. Everything the
request path needs (settings, engine, session factory, provider clients)
is built here and stored on ``app.state``; importing this module has no
side effects.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator, Optional

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import Settings, get_settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION, BRAND_NAME
from .database import Base, build_engine, build_session_factory
from .errors import register_error_handlers
from .routes.v1 import (
    availability as availability_v1,
    health as health_v1,
    integrations as integrations_v1,
    patterns as patterns_v1,
    prometheus as prometheus_v1,
    time_off as time_off_v1,
)
from .services.oauth_token_service import build_provider_clients

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once; later calls only adjust the level."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown without deprecated events."""
    settings: Settings = app.state.settings
    logger.info(f"{BRAND_NAME} API starting up (environment: {settings.environment})")
    yield
    logger.info(f"{BRAND_NAME} API shutting down")
    app.state.engine.dispose()


def build_api_router() -> APIRouter:
    """All versioned routers under /api/v1."""
    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(availability_v1.router, prefix="/availability")
    api_v1.include_router(patterns_v1.router, prefix="/availability/patterns")
    api_v1.include_router(time_off_v1.router, prefix="/availability/time-off")
    api_v1.include_router(integrations_v1.router, prefix="/integrations")
    return api_v1


def create_app(settings: Optional[Settings] = None, *, create_tables: bool = False) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to run with; loaded from the environment when omitted
        create_tables: Create missing tables on startup (local tooling and tests)

    Returns:
        Configured application
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    engine = build_engine(settings.database_url, echo=settings.sql_echo)
    if create_tables:
        from . import models  # noqa: F401  (registers tables)

        Base.metadata.create_all(bind=engine)

    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=app_lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.oauth_clients = build_provider_clients(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.app_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(build_api_router())
    app.include_router(health_v1.router, prefix="/health")
    app.include_router(prometheus_v1.router, prefix="/metrics")

    logger.debug(f"Application created for {settings.environment}")
    return app
