# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import copy
from typing import Dict, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient

from core.cache import TTLCache
from core.errors import IndexRequired, StorageUnavailable
from core.history import HistoryLog
from core.identity import UserDirectory
from core.permissions import PermissionResolver
from core.query_planner import ScopedQueryPlanner
from core.storage import DocumentStore, check_predicates
from core.timeutils import coerce_datetime
from dependencies.auth import CurrentUser, get_current_user
from dependencies.services import get_permission_cache, get_store
from main import create_app
from services.incident_service import IncidentService
from services.intervention_service import InterventionService
from services.lost_item_service import LostItemService


# ============================================================
# In-memory document store
# ============================================================
class InMemoryDocumentStore(DocumentStore):
    """
    Behaves like the real store for the core: equality and capped
    membership predicates only, optional descending order, a limit.

    ``fail_on`` holds (operation, collection) pairs that raise
    StorageUnavailable; ``index_required`` holds collections that reject
    filtered queries with IndexRequired.
    """

    def __init__(self, max_in_values: int = 10):
        self.max_in_values = max_in_values
        self.collections: Dict[str, Dict[str, dict]] = {}
        self.queries: List[tuple] = []
        self.fail_on = set()
        self.index_required = set()
        self._next_id = 0

    def _check(self, operation: str, collection: str):
        if (operation, collection) in self.fail_on:
            raise StorageUnavailable(f"{operation} on {collection} failed")

    def seed(self, collection: str, row: dict) -> str:
        row = copy.deepcopy(row)
        if "id" not in row:
            self._next_id += 1
            row["id"] = f"{collection}-{self._next_id}"
        self.collections.setdefault(collection, {})[row["id"]] = row
        return row["id"]

    def rows(self, collection: str) -> List[dict]:
        return [copy.deepcopy(row) for row in self.collections.get(collection, {}).values()]

    async def query(self, collection, predicates=(), limit=None, order_by=None):
        self.queries.append((collection, tuple(predicates), limit, order_by))
        self._check("query", collection)
        check_predicates(predicates, self.max_in_values)
        if predicates and collection in self.index_required:
            raise IndexRequired(f"{collection} needs an index")

        rows = [row for row in self.rows(collection) if all(p.matches(row) for p in predicates)]
        if order_by is not None:
            with_date = [row for row in rows if coerce_datetime(row.get(order_by.field))]
            without = [row for row in rows if not coerce_datetime(row.get(order_by.field))]
            with_date.sort(key=lambda row: coerce_datetime(row[order_by.field]), reverse=order_by.descending)
            rows = with_date + without
        if limit is not None:
            rows = rows[:limit]
        return rows

    async def get(self, collection, doc_id):
        self._check("get", collection)
        row = self.collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(row) if row is not None else None

    async def insert(self, collection, row):
        self._check("insert", collection)
        return self.seed(collection, {key: value for key, value in row.items() if key != "id"})

    async def update(self, collection, doc_id, partial):
        self._check("update", collection)
        self.collections.setdefault(collection, {})[doc_id].update(copy.deepcopy(partial))

    async def delete(self, collection, doc_id):
        self._check("delete", collection)
        self.collections.get(collection, {}).pop(doc_id, None)


# ============================================================
# Users
# ============================================================
USERS = [
    {"id": "admin-1", "email": "admin@hotels.test", "role": "system_admin", "name": "Ada Admin", "hotels": []},
    {"id": "alice-1", "email": "alice@hotels.test", "role": "standard", "name": "Alice", "hotels": ["H1", "H2"]},
    {"id": "bob-1", "email": "bob@hotels.test", "role": "standard", "displayName": "Bob B.", "hotels": ["H3"]},
    {"id": "carol-1", "email": "carol@hotels.test", "role": "standard", "hotels": [f"H{i}" for i in range(1, 13)]},
    {"id": "dan-1", "email": "dan@hotels.test", "role": "standard", "hotels": []},
]


@pytest.fixture
def store() -> InMemoryDocumentStore:
    store = InMemoryDocumentStore()
    for user in USERS:
        store.seed("users", user)
    return store


@pytest.fixture
def directory(store) -> UserDirectory:
    return UserDirectory(store)


@pytest.fixture
def resolver(directory) -> PermissionResolver:
    return PermissionResolver(directory, TTLCache(ttl_seconds=300))


@pytest.fixture
def planner(resolver) -> ScopedQueryPlanner:
    return ScopedQueryPlanner(resolver, max_in_values=10, default_limit=100, unscoped_hotel_policy="fallback")


@pytest.fixture
def history_log(store, directory) -> HistoryLog:
    return HistoryLog(store, directory, candidate_limit=500, scan_unindexed=False)


@pytest.fixture
def incident_service(store, resolver, planner, history_log) -> IncidentService:
    return IncidentService(store, resolver, planner, history_log)


@pytest.fixture
def intervention_service(store, resolver, planner, history_log) -> InterventionService:
    return InterventionService(store, resolver, planner, history_log)


@pytest.fixture
def lost_item_service(store, resolver, planner, history_log) -> LostItemService:
    return LostItemService(store, resolver, planner, history_log)


# ============================================================
# HTTP
# ============================================================
@pytest.fixture(scope="function")
def app(store):
    """Create a test FastAPI application wired to the in-memory store."""
    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    cache = TTLCache(ttl_seconds=300)
    app.dependency_overrides[get_permission_cache] = lambda: cache
    yield app
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login(app):
    """Authenticate subsequent requests as the given email."""

    def _login(email: str, user_id: Optional[str] = None):
        user = CurrentUser(id=user_id or email.split("@")[0], email=email)
        app.dependency_overrides[get_current_user] = lambda: user
        return user

    return _login
