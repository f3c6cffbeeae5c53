"""
API v1 router - aggregates all endpoint modules.
"""

from fastapi import APIRouter

from money_manager.api.v1.endpoints import admin, collection, health, statistics, users

api_router = APIRouter(prefix="/v1")

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(collection.router, prefix="/collection", tags=["collection"])
api_router.include_router(statistics.router, prefix="/statistics", tags=["statistics"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
