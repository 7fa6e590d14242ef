"""
API endpoints package.

Aggregates the subscription, newsletter and login routers.
"""

from fastapi import APIRouter

from src.api.endpoints.login import router as login_router
from src.api.endpoints.newsletters import router as newsletters_router
from src.api.endpoints.subscriptions import router as subscriptions_router

router = APIRouter()
router.include_router(subscriptions_router)
router.include_router(newsletters_router)
router.include_router(login_router)

__all__ = ["router"]
