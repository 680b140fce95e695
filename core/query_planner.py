# core/query_planner.py

"""
Scoped query planning.

Turns "what the caller asked for" plus "what the caller may see" into a
query the document store can run without composite indexes, and says
explicitly what has to happen after the fetch:

    client_side_filter  the hotel scope was too large for one membership
                        predicate, so rows are fetched unfiltered and kept
                        only if their hotel is in scope
    client_side_sort    a filter is present, so ordering by date on the
                        server would need a composite index; rows are
                        sorted newest-first after the fetch

An optional date lower bound is always applied after the fetch too.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from core.config import settings
from core.logging_config import logger
from core.permissions import AccessScope, PermissionResolver, is_all_filter
from core.storage import DocumentStore, OrderBy, Predicate
from core.timeutils import coerce_datetime


HOTEL_FIELD = "hotelId"


@dataclass(frozen=True)
class QueryPlan:
    collection: str
    scope: AccessScope
    predicates: Tuple[Predicate, ...] = ()
    limit: int = 100
    order_by: Optional[OrderBy] = None

    matches_nothing: bool = False
    client_side_filter: bool = False
    client_side_sort: bool = False
    sort_field: str = "date"
    date_field: str = "date"
    date_from: Optional[datetime] = None

    # Set when an out-of-scope hotel request was replaced by the first accessible hotel
    substituted_hotel: Optional[str] = None

    @property
    def hotel_predicate(self) -> Optional[Predicate]:
        for predicate in self.predicates:
            if predicate.field == HOTEL_FIELD:
                return predicate
        return None

    def referenced_hotels(self) -> List[str]:
        predicate = self.hotel_predicate
        if predicate is None:
            return []
        if predicate.op == "==":
            return [predicate.value]
        return list(predicate.value)


class ScopedQueryPlanner:
    def __init__(
        self,
        resolver: PermissionResolver,
        max_in_values: Optional[int] = None,
        default_limit: Optional[int] = None,
        unscoped_hotel_policy: Optional[str] = None,
    ):
        self.resolver = resolver
        self.max_in_values = max_in_values or settings.MAX_IN_PREDICATE_VALUES
        self.default_limit = default_limit or settings.DEFAULT_QUERY_LIMIT
        self.unscoped_hotel_policy = unscoped_hotel_policy or settings.UNSCOPED_HOTEL_POLICY

    async def plan(
        self,
        identity: Optional[str],
        requested_hotel: Optional[str] = None,
        *,
        collection: str,
        status: Optional[str] = None,
        status_field: str = "status",
        sort_field: str = "date",
        date_from: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> QueryPlan:
        scope = await self.resolver.accessible_hotels(identity)
        return self.plan_for_scope(
            scope,
            requested_hotel,
            collection=collection,
            status=status,
            status_field=status_field,
            sort_field=sort_field,
            date_from=date_from,
            limit=limit,
        )

    def plan_for_scope(
        self,
        scope: AccessScope,
        requested_hotel: Optional[str] = None,
        *,
        collection: str,
        status: Optional[str] = None,
        status_field: str = "status",
        sort_field: str = "date",
        date_from: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> QueryPlan:
        base = dict(
            collection=collection,
            scope=scope,
            limit=limit or self.default_limit,
            sort_field=sort_field,
            date_field=sort_field,
            date_from=date_from,
        )

        if scope.is_empty:
            return QueryPlan(matches_nothing=True, **base)

        predicates: List[Predicate] = []
        client_side_filter = False
        substituted = None

        if scope.all_hotels:
            if not is_all_filter(requested_hotel):
                predicates.append(Predicate.eq(HOTEL_FIELD, requested_hotel))

        elif not is_all_filter(requested_hotel):
            if scope.contains(requested_hotel):
                predicates.append(Predicate.eq(HOTEL_FIELD, requested_hotel))
            elif self.unscoped_hotel_policy == "deny":
                logger.info(f"Hotel filter {requested_hotel!r} is outside the caller's scope, denying")
                return QueryPlan(matches_nothing=True, **base)
            else:
                substituted = scope.hotels[0]
                logger.info(
                    f"Hotel filter {requested_hotel!r} is outside the caller's scope, "
                    f"falling back to {substituted!r}"
                )
                predicates.append(Predicate.eq(HOTEL_FIELD, substituted))

        elif len(scope) == 1:
            predicates.append(Predicate.eq(HOTEL_FIELD, scope.hotels[0]))
        elif len(scope) <= self.max_in_values:
            predicates.append(Predicate.in_(HOTEL_FIELD, scope.hotels))
        else:
            client_side_filter = True

        if status and status != "all":
            predicates.append(Predicate.eq(status_field, status))

        # Ordering on one field while filtering on another needs a composite
        # index, so any filter moves the sort to the client.
        if predicates:
            order_by = None
            client_side_sort = True
        else:
            order_by = OrderBy(sort_field, descending=True)
            client_side_sort = False

        return QueryPlan(
            predicates=tuple(predicates),
            order_by=order_by,
            client_side_filter=client_side_filter,
            client_side_sort=client_side_sort,
            substituted_hotel=substituted,
            **base,
        )


def _sort_key(row: Dict[str, Any], field: str) -> Tuple[int, float]:
    moment = coerce_datetime(row.get(field))
    if moment is None:
        return (0, 0.0)
    return (1, moment.timestamp())


def apply_post_fetch(plan: QueryPlan, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Client-side half of a plan: membership filter, newest-first sort, date bound."""
    result = list(rows)

    if plan.client_side_filter:
        result = [row for row in result if plan.scope.contains(row.get(HOTEL_FIELD))]

    if plan.client_side_sort:
        # Rows without a usable date sink to the end
        result.sort(key=lambda row: _sort_key(row, plan.sort_field), reverse=True)

    if plan.date_from is not None:
        lower = coerce_datetime(plan.date_from)
        kept = []
        for row in result:
            moment = coerce_datetime(row.get(plan.date_field))
            if moment is not None and moment >= lower:
                kept.append(row)
        result = kept

    return result


async def execute_plan(store: DocumentStore, plan: QueryPlan) -> List[Dict[str, Any]]:
    """Run a plan against the store. A plan that matches nothing never touches storage."""
    if plan.matches_nothing:
        return []

    rows = await store.query(
        plan.collection,
        list(plan.predicates),
        limit=plan.limit,
        order_by=plan.order_by,
    )
    return apply_post_fetch(plan, rows)
