"""Shared FastAPI dependencies.

Provides the classification store and the ROI service used by the
route files. Both live on ``app.state`` so tests can swap them.
"""

from __future__ import annotations

from fastapi import Request

from src.core.financial.classification_store import ClassificationStore
from src.core.financial.service import ROIService


def get_classification_store(request: Request) -> ClassificationStore:
    return request.app.state.classification_store


def get_roi_service(request: Request) -> ROIService:
    return request.app.state.roi_service
