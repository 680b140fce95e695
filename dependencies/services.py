# dependencies/services.py

"""
Process-wide wiring of the access & audit core.

One document store, one user directory and one permission cache are
shared by every request; routes receive the services through Depends.
Tests override ``get_store`` (and friends) with app.dependency_overrides.
"""

from functools import lru_cache

from fastapi import Depends

from core.cache import TTLCache
from core.config import settings
from core.history import HistoryLog
from core.identity import UserDirectory
from core.permissions import PermissionResolver
from core.query_planner import ScopedQueryPlanner
from core.storage import DocumentStore, SupabaseDocumentStore
from services.incident_service import IncidentService
from services.intervention_service import InterventionService
from services.lost_item_service import LostItemService


@lru_cache()
def get_store() -> DocumentStore:
    return SupabaseDocumentStore()


@lru_cache()
def get_permission_cache() -> TTLCache:
    return TTLCache(
        ttl_seconds=settings.PERMISSION_CACHE_TTL_SECONDS,
        max_entries=settings.PERMISSION_CACHE_MAX_ENTRIES,
    )


def get_resolver(
    store: DocumentStore = Depends(get_store),
    cache: TTLCache = Depends(get_permission_cache),
) -> PermissionResolver:
    return PermissionResolver(UserDirectory(store), cache)


def get_planner(resolver: PermissionResolver = Depends(get_resolver)) -> ScopedQueryPlanner:
    return ScopedQueryPlanner(resolver)


def get_history_log(store: DocumentStore = Depends(get_store)) -> HistoryLog:
    return HistoryLog(store, UserDirectory(store))


# -----------------------------------------------------
# Entity services
# -----------------------------------------------------
def get_incident_service(
    store: DocumentStore = Depends(get_store),
    resolver: PermissionResolver = Depends(get_resolver),
    planner: ScopedQueryPlanner = Depends(get_planner),
    history: HistoryLog = Depends(get_history_log),
) -> IncidentService:
    return IncidentService(store, resolver, planner, history)


def get_intervention_service(
    store: DocumentStore = Depends(get_store),
    resolver: PermissionResolver = Depends(get_resolver),
    planner: ScopedQueryPlanner = Depends(get_planner),
    history: HistoryLog = Depends(get_history_log),
) -> InterventionService:
    return InterventionService(store, resolver, planner, history)


def get_lost_item_service(
    store: DocumentStore = Depends(get_store),
    resolver: PermissionResolver = Depends(get_resolver),
    planner: ScopedQueryPlanner = Depends(get_planner),
    history: HistoryLog = Depends(get_history_log),
) -> LostItemService:
    return LostItemService(store, resolver, planner, history)
