"""Main API router aggregating all routes."""

from fastapi import APIRouter

from thinkarr.api.routes import chat, conversations, health, mcp, models

# Create main router
api_router = APIRouter()

# Include route modules
api_router.include_router(health.router)
api_router.include_router(chat.router)
api_router.include_router(conversations.router)
api_router.include_router(models.router)
api_router.include_router(mcp.router)  # Tool gateway for external agents
