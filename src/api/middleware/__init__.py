"""FastAPI middleware for the ROI API."""

from src.api.middleware.request import RequestIDMiddleware, ResponseHeadersMiddleware

__all__ = [
    "RequestIDMiddleware",
    "ResponseHeadersMiddleware",
]
