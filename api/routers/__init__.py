"""
Router package for the Training Plans API.

This package contains all API routers organized by domain:
- health: Health check endpoints
- plans: Training plan composition, updates and per-set edits
"""

from api.routers.health import router as health_router
from api.routers.plans import router as plans_router

__all__ = [
    "health_router",
    "plans_router",
]
