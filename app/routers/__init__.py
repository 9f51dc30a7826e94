# app/routers/__init__.py
"""
API routers for v1 endpoints.
"""

from app.routers.public import router as public_router
from app.routers.services import router as services_router

__all__ = [
    "public_router",
    "services_router",
]
