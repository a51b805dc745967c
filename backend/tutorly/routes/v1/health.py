# backend/tutorly/routes/v1/health.py
"""
Health check endpoint for monitoring and load balancer probes.
"""

import asyncio
from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...api.dependencies import get_db, get_settings_dep
from ...core.config import Settings
from ...core.constants import API_VERSION, BRAND_NAME
from ...schemas.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def _database_status(db: Session) -> str:
    try:
        db.execute(text("SELECT 1"))
        return "ok"
    except SQLAlchemyError as e:
        logger.error(f"Health check database ping failed: {str(e)}")
        return "unavailable"


@router.get("", response_model=HealthResponse)
async def health_check(
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
) -> HealthResponse:
    """
    Health check endpoint.

    Returns 503 when the database does not answer so load balancers stop
    routing to this instance.
    """
    database = await asyncio.to_thread(_database_status, db)
    healthy = database == "ok"
    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(
        status="healthy" if healthy else "degraded",
        service=f"{BRAND_NAME.lower()}-api",
        version=API_VERSION,
        environment=settings.environment,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        database=database,
    )
