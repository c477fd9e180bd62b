"""
API v1 Router

Aggregates all v1 API routes.
"""
from fastapi import APIRouter
from partsourcing.api.v1 import parts

# Create main v1 router
api_router = APIRouter()

# Include sub-routers
api_router.include_router(
    parts.router,
    prefix="/parts",
    tags=["Parts - Sourcing & Pricing"]
)
