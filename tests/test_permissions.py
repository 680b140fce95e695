# tests/test_permissions.py

"""
Tests for hotel-level permission resolution.
"""

import pytest

from core.cache import TTLCache
from core.errors import StorageUnavailable
from core.permissions import AccessScope, PermissionResolver, is_all_filter


# -----------------------------------------------------
# AccessScope
# -----------------------------------------------------
def test_scope_of_keeps_order_and_drops_duplicates():
    scope = AccessScope.of(["H2", "H1", "H2", "", None])
    assert scope.hotels == ("H2", "H1")
    assert len(scope) == 2


def test_everything_contains_any_hotel():
    scope = AccessScope.everything()
    assert scope.contains("anything")
    assert not scope.is_empty


def test_nothing_is_empty():
    scope = AccessScope.nothing()
    assert scope.is_empty
    assert not scope.contains("H1")


def test_is_all_filter():
    assert is_all_filter("all")
    assert is_all_filter(None)
    assert is_all_filter("")
    assert not is_all_filter("H1")


# -----------------------------------------------------
# Resolver
# -----------------------------------------------------
@pytest.mark.asyncio
async def test_admin_resolves_to_all_hotels(resolver):
    scope = await resolver.accessible_hotels("admin@hotels.test")
    assert scope.all_hotels
    assert await resolver.is_admin("admin@hotels.test")


@pytest.mark.asyncio
async def test_standard_user_resolves_to_listed_hotels(resolver):
    scope = await resolver.accessible_hotels("alice@hotels.test")
    assert not scope.all_hotels
    assert scope.hotels == ("H1", "H2")
    assert not await resolver.is_admin("alice@hotels.test")


@pytest.mark.asyncio
async def test_identity_can_be_a_user_id(resolver):
    scope = await resolver.accessible_hotels("bob-1")
    assert scope.hotels == ("H3",)


@pytest.mark.asyncio
async def test_email_lookup_is_case_insensitive(resolver):
    scope = await resolver.accessible_hotels("  Alice@Hotels.TEST ")
    assert scope.hotels == ("H1", "H2")


@pytest.mark.asyncio
async def test_unknown_identity_has_no_access(resolver):
    scope = await resolver.accessible_hotels("ghost@hotels.test")
    assert scope.is_empty
    assert not await resolver.has_access("ghost@hotels.test", "H1")


@pytest.mark.asyncio
async def test_missing_identity_has_no_access(resolver):
    assert (await resolver.accessible_hotels(None)).is_empty
    assert (await resolver.accessible_hotels("")).is_empty


@pytest.mark.asyncio
async def test_user_without_hotels_has_no_access(resolver):
    assert (await resolver.accessible_hotels("dan@hotels.test")).is_empty


@pytest.mark.asyncio
async def test_has_access(resolver):
    assert await resolver.has_access("alice@hotels.test", "H1")
    assert not await resolver.has_access("alice@hotels.test", "H3")
    assert await resolver.has_access("admin@hotels.test", "H99")


@pytest.mark.asyncio
async def test_filter_hotels_preserves_input_order(resolver):
    kept = await resolver.filter_hotels("alice@hotels.test", ["H3", "H2", "H1"])
    assert kept == ["H2", "H1"]
    assert await resolver.filter_hotels("admin@hotels.test", ["X", "Y"]) == ["X", "Y"]


@pytest.mark.asyncio
async def test_resolved_users_are_cached(store, directory):
    resolver = PermissionResolver(directory, TTLCache(ttl_seconds=300))
    await resolver.accessible_hotels("alice@hotels.test")
    queries_before = len(store.queries)

    await resolver.accessible_hotels("alice@hotels.test")
    assert len(store.queries) == queries_before

    # Stale until cleared
    store.collections["users"]["alice-1"]["hotels"] = ["H9"]
    assert (await resolver.accessible_hotels("alice@hotels.test")).hotels == ("H1", "H2")

    resolver.clear_user_cache()
    assert (await resolver.accessible_hotels("alice@hotels.test")).hotels == ("H9",)


@pytest.mark.asyncio
async def test_unknown_identities_are_not_cached(store, directory):
    resolver = PermissionResolver(directory, TTLCache(ttl_seconds=300))
    assert (await resolver.accessible_hotels("late@hotels.test")).is_empty

    store.seed("users", {"id": "late-1", "email": "late@hotels.test", "hotels": ["H4"]})
    assert (await resolver.accessible_hotels("late@hotels.test")).hotels == ("H4",)


@pytest.mark.asyncio
async def test_unknown_role_is_treated_as_standard(store, resolver):
    store.seed("users", {"id": "odd-1", "email": "odd@hotels.test", "role": "superuser", "hotels": ["H1"]})
    scope = await resolver.accessible_hotels("odd@hotels.test")
    assert not scope.all_hotels
    assert scope.hotels == ("H1",)


@pytest.mark.asyncio
async def test_storage_failure_is_not_no_access(store, resolver):
    store.fail_on.add(("query", "users"))
    with pytest.raises(StorageUnavailable):
        await resolver.accessible_hotels("alice@hotels.test")
