# backend/app/routes/v1/health.py
"""
Health check endpoint for monitoring and load balancer probes.

Does not touch the database.
"""

import logging

from fastapi import APIRouter, Response

from app.core.config import settings
from app.core.constants import API_VERSION
from app.core.timezone_utils import to_iso_utc, utc_now
from app.schemas.main_responses import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def _health_payload() -> HealthResponse:
    """Generate the standard health response payload."""
    return HealthResponse(
        status="OK",
        timestamp=to_iso_utc(utc_now()),
        version=API_VERSION,
        environment=settings.environment,
    )


@router.get("/health", response_model=HealthResponse)
def health_check(response: Response) -> HealthResponse:
    """Liveness probe; no auth, no database access."""
    response.headers["Cache-Control"] = "no-store"
    return _health_payload()
