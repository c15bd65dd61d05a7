"""API routes."""

from .drafts import router as drafts_router
from .portfolios import router as portfolios_router

__all__ = [
    "drafts_router",
    "portfolios_router",
]
