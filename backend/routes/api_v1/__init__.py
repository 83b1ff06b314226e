"""API v1: read-only data-quality endpoints."""

from fastapi import APIRouter

from .quality import router as quality_router

router = APIRouter(prefix="/api/v1", tags=["api_v1"])
router.include_router(quality_router)

api_v1_router = router
