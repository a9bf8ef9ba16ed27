"""API route modules."""
from .insights import router as insights_router
from .adaptive import router as adaptive_router

__all__ = [
    "insights_router",
    "adaptive_router",
]
