# routers/__init__.py

from fastapi import APIRouter

from .incidents import router as incidents_router
from .interventions import router as interventions_router
from .lost_items import router as lost_items_router
from .me import router as me_router
from .health import router as health_router


api_router = APIRouter()

api_router.include_router(incidents_router)
api_router.include_router(interventions_router)
api_router.include_router(lost_items_router)
api_router.include_router(me_router)
api_router.include_router(health_router)

__all__ = ["api_router"]
