# core/storage.py

"""
Narrow document-store interface used by the access & audit core.

Predicates are limited to equality and bounded-cardinality membership;
there are no joins. Ordering combined with a filter on another field
would need a composite index. Callers sort client-side, except the history
read, which falls back to a scan when the store raises IndexRequired.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from fastapi.encoders import jsonable_encoder

from core.config import settings
from core.errors import StorageUnavailable, handle_supabase_error
from core.logging_config import logger
from core.supabase_client import get_supabase_client


EQ = "=="
IN = "in"


@dataclass(frozen=True)
class Predicate:
    field: str
    op: str
    value: Any

    @classmethod
    def eq(cls, field: str, value: Any) -> "Predicate":
        return cls(field, EQ, value)

    @classmethod
    def in_(cls, field: str, values: Sequence[Any]) -> "Predicate":
        return cls(field, IN, tuple(values))

    def matches(self, row: Dict[str, Any]) -> bool:
        if self.op == EQ:
            return row.get(self.field) == self.value
        return row.get(self.field) in self.value


@dataclass(frozen=True)
class OrderBy:
    field: str
    descending: bool = True


class DocumentStore(ABC):
    """Storage collaborator. Rows are plain dicts carrying their ``id``."""

    @abstractmethod
    async def query(
        self,
        collection: str,
        predicates: Sequence[Predicate] = (),
        limit: Optional[int] = None,
        order_by: Optional[OrderBy] = None,
    ) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def insert(self, collection: str, row: Dict[str, Any]) -> str:
        ...

    @abstractmethod
    async def update(self, collection: str, doc_id: str, partial: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        ...


def check_predicates(predicates: Sequence[Predicate], max_in_values: int):
    for predicate in predicates:
        if predicate.op not in (EQ, IN):
            raise ValueError(f"Unsupported predicate operator: {predicate.op}")
        if predicate.op == IN and len(predicate.value) > max_in_values:
            raise ValueError(
                f"Membership predicate on '{predicate.field}' has {len(predicate.value)} values "
                f"(max {max_in_values})"
            )


# ============================================================
# Supabase-backed store
# ============================================================
class SupabaseDocumentStore(DocumentStore):
    """
    One table per collection. Every call is bounded by ``timeout`` and
    client faults surface as StorageUnavailable.
    """

    def __init__(
        self,
        client_factory: Callable[[], Awaitable[Any]] = get_supabase_client,
        timeout: Optional[float] = None,
        max_in_values: Optional[int] = None,
    ):
        self._client_factory = client_factory
        self.timeout = timeout or settings.STORAGE_TIMEOUT_SECONDS
        self.max_in_values = max_in_values or settings.MAX_IN_PREDICATE_VALUES

    async def _client(self):
        client = await self._client_factory()
        if client is None:
            raise StorageUnavailable("Supabase client not configured")
        return client

    async def _run(self, operation: str, awaitable: Awaitable[Any]):
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"{operation}: timed out after {self.timeout}s")
            raise StorageUnavailable(f"{operation} timed out")
        except Exception as e:
            raise handle_supabase_error(e, operation)

    async def query(self, collection, predicates=(), limit=None, order_by=None):
        check_predicates(predicates, self.max_in_values)
        client = await self._client()

        q = client.table(collection).select("*")
        for predicate in predicates:
            if predicate.op == EQ:
                q = q.eq(predicate.field, jsonable_encoder(predicate.value))
            else:
                q = q.in_(predicate.field, jsonable_encoder(list(predicate.value)))
        if order_by is not None:
            q = q.order(order_by.field, desc=order_by.descending)
        if limit is not None:
            q = q.limit(limit)

        result = await self._run(f"Failed to query {collection}", q.execute())
        return result.data or []

    async def get(self, collection, doc_id):
        client = await self._client()
        q = client.table(collection).select("*").eq("id", doc_id).limit(1)
        result = await self._run(f"Failed to fetch {collection}/{doc_id}", q.execute())
        return result.data[0] if result.data else None

    async def insert(self, collection, row):
        client = await self._client()
        q = client.table(collection).insert(jsonable_encoder(row))
        result = await self._run(f"Failed to insert into {collection}", q.execute())
        if not result.data:
            raise StorageUnavailable(f"Insert into {collection} returned no row")
        return str(result.data[0]["id"])

    async def update(self, collection, doc_id, partial):
        client = await self._client()
        q = client.table(collection).update(jsonable_encoder(partial)).eq("id", doc_id)
        await self._run(f"Failed to update {collection}/{doc_id}", q.execute())

    async def delete(self, collection, doc_id):
        client = await self._client()
        q = client.table(collection).delete().eq("id", doc_id)
        await self._run(f"Failed to delete {collection}/{doc_id}", q.execute())
