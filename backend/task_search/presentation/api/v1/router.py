"""V1 API router: aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from task_search.presentation.api.v1.endpoints.health import router as health_router
from task_search.presentation.api.v1.search_controller import router as search_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(search_router)
