"""API route registration."""

from fastapi import APIRouter

from namecraft.api.handlers.generate import router as generate_router
from namecraft.api.handlers.health import router as health_router
from namecraft.api.handlers.history import router as history_router

# Main API router that aggregates all endpoint routers
api_router = APIRouter()

# Include health check routes
api_router.include_router(health_router, tags=["health"])

# Include generation routes
api_router.include_router(generate_router, tags=["generate"])

# Include history routes
api_router.include_router(history_router, tags=["history"])
