# core/supabase_client.py

from typing import Optional

from supabase import AsyncClient, acreate_client

from core.config import settings
from core.logging_config import logger


_client: Optional[AsyncClient] = None


# ============================================================
# Supabase Client Factory (ALWAYS service role)
# ============================================================

async def get_supabase_client() -> Optional[AsyncClient]:
    """
    Returns the shared async Supabase client, created on first use with the
    SERVICE ROLE KEY. Row-level scoping is enforced by this service, not by
    database policies, so the client needs full read/write on all tables.
    """
    global _client

    if _client is not None:
        return _client

    supabase_url = settings.SUPABASE_URL
    supabase_key = settings.SUPABASE_SERVICE_ROLE_KEY  # MUST be service-role

    if not supabase_url or not supabase_key:
        logger.error("Missing Supabase credentials")
        logger.error(f"   URL: {supabase_url}")
        logger.error(f"   SERVICE ROLE KEY: {'SET' if supabase_key else 'MISSING'}")
        return None

    try:
        _client = await acreate_client(supabase_url, supabase_key)
    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None

    return _client


def reset_supabase_client():
    """Drop the shared client (used on shutdown)."""
    global _client
    _client = None


# ============================================================
# Ping Supabase for health checks
# ============================================================

async def ping_supabase() -> dict:
    """
    Simple connectivity check over the collections this service reads.
    """
    client = await get_supabase_client()
    if client is None:
        return {"service": "Supabase", "status": "not_configured"}

    tables = ["incidents", "technical_interventions", "lost_items", "history", "users"]
    results = {}

    for t in tables:
        try:
            res = await client.table(t).select("id").limit(1).execute()
            results[t] = {
                "status": "ok",
                "rows_found": len(res.data or []),
            }
        except Exception as err:
            results[t] = {"status": "error", "detail": str(err)}

    status = "ok" if all(r["status"] == "ok" for r in results.values()) else "degraded"
    return {
        "service": "Supabase",
        "status": status,
        "tables": results,
    }
