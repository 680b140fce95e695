# routers/health.py

from fastapi import APIRouter

from core.config import settings
from core.logging_config import logger
from core.supabase_client import ping_supabase

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/db
# Checks Supabase connection + table queries
# No auth required
# -----------------------------------------------------
@router.get("/db", summary="Supabase / DB health check")
async def health_db():
    """
    Queries each collection the service reads and reports per-table status.
    Safe for external health monitors (no auth required).
    """
    try:
        status = await ping_supabase()
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return {"service": "Supabase", "status": "error", "error": str(e)}

    return {
        "service": "Supabase",
        "status": status.get("status", "unknown"),
        "details": status,
    }


# -----------------------------------------------------
# GET /health/app
# -----------------------------------------------------
@router.get("/app", summary="App health check")
async def health_app():
    return {
        "service": settings.PROJECT_NAME,
        "status": "ok",
    }
