"""API endpoints."""

from .slides import router as slides_router

__all__ = ["slides_router"]
