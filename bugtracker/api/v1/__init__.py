"""API v1 routes."""

from fastapi import APIRouter

from bugtracker.api.v1 import auth, files, health, products, reports, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, tags=["users"])
router.include_router(reports.router, tags=["reports"])
router.include_router(products.router, prefix="/products", tags=["products"])
router.include_router(files.router, tags=["files"])
