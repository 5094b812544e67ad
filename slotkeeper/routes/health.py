# slotkeeper/routes/health.py
"""
Health check endpoint for monitoring and load balancer probes.
"""

import logging

from fastapi import APIRouter

from ..core.config import settings
from ..core.constants import API_VERSION
from ..schemas.base_responses import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe; does not touch the database."""
    return HealthResponse(status="healthy", service=settings.brand_name, version=API_VERSION)
