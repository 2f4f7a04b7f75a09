"""API routes package."""

from fastapi import APIRouter

from antifraud.api.routes.antifraud import router as antifraud_router
from antifraud.api.routes.registry import router as registry_router

# Create API router with all sub-routers
api_router = APIRouter()

api_router.include_router(antifraud_router)
api_router.include_router(registry_router)


__all__ = [
    "api_router",
    "antifraud_router",
    "registry_router",
]
