"""ValueDock ROI FastAPI application entry point.

Configures the FastAPI app with:
- Logging from settings
- CORS and request middleware
- The organization cost classification store and the ROI service on app.state
- Route registration (health, cost classification, ROI, scoring)
- OpenAPI documentation at /docs (debug mode only)
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.middleware import RequestIDMiddleware, ResponseHeadersMiddleware
from src.api.routes import cost_classification, health, roi, scoring
from src.api.version import API_VERSION
from src.core.config import get_settings
from src.core.financial.classification_store import InMemoryClassificationStore
from src.core.financial.service import ROIService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log startup and shutdown; the engine holds no connections."""
    settings = get_settings()
    logger.info(
        "%s starting (env=%s, horizon %d-%d months)",
        settings.app_name,
        settings.app_env,
        settings.roi_min_time_horizon_months,
        settings.roi_max_time_horizon_months,
    )
    yield
    logger.info("%s stopped", settings.app_name)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.app_name,
        description="ROI modeling engine for process automation portfolios",
        version=API_VERSION,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.state.classification_store = InMemoryClassificationStore()
    app.state.roi_service = ROIService(settings)

    # Note: middleware is applied in reverse order (last added = first executed).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID", "Accept"],
    )
    app.add_middleware(ResponseHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(health.router)
    app.include_router(cost_classification.router)
    app.include_router(roi.router)
    app.include_router(scoring.router)

    # -- Error Handlers ---
    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.warning("Validation error [%s]: %s", request_id, exc)
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc), "request_id": request_id},
        )

    @app.exception_handler(Exception)  # Intentionally broad: top-level global error handler
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.exception("Unhandled error [%s]: %s", request_id, exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "request_id": request_id},
        )

    return app


# Application instance used by uvicorn
app = create_app()
