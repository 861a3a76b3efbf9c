"""
API v1 router - aggregates all endpoint modules (RESTful structure).
Everything except health checks counts against the per-client API rate limit.
"""

from fastapi import APIRouter, Depends

from rewear.api.v1.endpoints import admin, auth, health, items, notifications, search, swaps, users
from rewear.core.rate_limit import api_rate_limit

api_router = APIRouter(prefix="/v1")
limited = [Depends(api_rate_limit)]

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"], dependencies=limited)
api_router.include_router(users.router, prefix="/users", tags=["users"], dependencies=limited)
api_router.include_router(items.router, prefix="/items", tags=["items"], dependencies=limited)
api_router.include_router(swaps.router, prefix="/swaps", tags=["swaps"], dependencies=limited)
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"], dependencies=limited)
api_router.include_router(admin.router, prefix="/admin", tags=["admin"], dependencies=limited)
api_router.include_router(search.router, prefix="/search", tags=["search"], dependencies=limited)
