"""
System API router.

Handles the root endpoint and the liveness check.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

import siteplan
from api.config import settings
from api.middleware import get_request_id
from siteplan.regulations.zones import ZONE_REGULATIONS

router = APIRouter(tags=["System"])

logger = logging.getLogger(__name__)


@router.get("/")
async def root():
    """
    API root endpoint.

    Returns basic API information and available endpoint categories.
    """
    return {
        "name": "SITEPLAN API",
        "version": siteplan.__version__,
        "status": "operational",
        "docs": "/api/docs",
        "endpoints": {
            "health": "/api/health",
            "regulations": "/api/regulations/...",
            "compliance": "/api/compliance/...",
            "geometry": "/api/geometry/...",
        },
    }


@router.get("/api/health")
async def health_check():
    """
    Liveness check.

    The engine has no external dependencies, so a response means healthy.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": siteplan.__version__,
        "environment": settings.environment,
        "zones_loaded": len(ZONE_REGULATIONS),
        "request_id": get_request_id(),
    }
