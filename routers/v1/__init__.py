"""API v1 router aggregation."""

from fastapi import APIRouter

from routers.v1.admin import router as admin_router
from routers.v1.public_config import router as config_router
from routers.v1.staff import router as staff_router

# Create v1 API router
router = APIRouter(prefix="/v1")

# Include sub-routers
router.include_router(
    staff_router,
    prefix="/staff",
    tags=["Staff"],
)
router.include_router(
    admin_router,
    prefix="/admin",
    tags=["Admin"],
)
router.include_router(
    config_router,
    prefix="/config",
    tags=["Config"],
)
