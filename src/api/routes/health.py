"""Health check endpoint.

The ROI engine has no backing services of its own; health reports the
configured environment, the API version and whether the classification
store is attached.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Request

from src.api.version import API_VERSION
from src.core.config import get_settings

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/api/v1/health")
async def health_check(request: Request) -> dict[str, Any]:
    """Report service health.

    Returns:
        JSON object with overall status and component statuses:
        {
            "status": "healthy" | "degraded",
            "services": {"classification_store": "up" | "down"},
            "version": "1.0.0",
            ...
        }
    """
    services: dict[str, str] = {}
    if getattr(request.app.state, "classification_store", None) is not None:
        services["classification_store"] = "up"
    else:
        logger.warning("Classification store is not attached")
        services["classification_store"] = "down"

    status = "healthy" if all(s == "up" for s in services.values()) else "degraded"
    return {
        "status": status,
        "services": services,
        "version": API_VERSION,
        "environment": get_settings().app_env,
        "timestamp": datetime.now(UTC).isoformat(),
    }
