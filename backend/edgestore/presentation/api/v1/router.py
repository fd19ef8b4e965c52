"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from edgestore.presentation.api.v1.endpoints.activity_logs import router as activity_logs_router
from edgestore.presentation.api.v1.endpoints.backup import router as backup_router
from edgestore.presentation.api.v1.endpoints.collections import router as collections_router
from edgestore.presentation.api.v1.endpoints.exports import router as exports_router
from edgestore.presentation.api.v1.endpoints.health import router as health_router
from edgestore.presentation.api.v1.endpoints.site_settings import router as site_settings_router
from edgestore.presentation.api.v1.endpoints.storage import router as storage_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(collections_router)
router.include_router(backup_router)
router.include_router(activity_logs_router)
router.include_router(storage_router)
router.include_router(site_settings_router)
router.include_router(exports_router)
