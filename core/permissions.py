# core/permissions.py

"""
Hotel-level access resolution.

A user sees either every hotel (system admins) or the hotels listed on
their account. Unknown identities resolve to an empty scope rather than
an error so reads do not reveal which accounts exist. Storage
faults are not "no access" and propagate as StorageUnavailable.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from core.cache import TTLCache
from core.config import settings
from core.identity import UserDirectory
from core.logging_config import logger
from models.user import User


ALL_HOTELS = "all"


@dataclass(frozen=True)
class AccessScope:
    """
    Either every hotel (``all_hotels``) or a finite ordered set of hotel ids.
    An empty, non-``all`` scope means no access.
    """

    all_hotels: bool = False
    hotels: Tuple[str, ...] = ()

    @classmethod
    def everything(cls) -> "AccessScope":
        return cls(all_hotels=True)

    @classmethod
    def nothing(cls) -> "AccessScope":
        return cls()

    @classmethod
    def of(cls, hotels: Iterable[str]) -> "AccessScope":
        ordered = []
        for hotel_id in hotels:
            if hotel_id and hotel_id not in ordered:
                ordered.append(hotel_id)
        return cls(hotels=tuple(ordered))

    @property
    def is_empty(self) -> bool:
        return not self.all_hotels and not self.hotels

    def contains(self, hotel_id: Optional[str]) -> bool:
        if self.all_hotels:
            return True
        return hotel_id in self.hotels

    def __len__(self) -> int:
        return len(self.hotels)


def scope_for(user: Optional[User]) -> AccessScope:
    if user is None:
        return AccessScope.nothing()
    if user.is_admin:
        return AccessScope.everything()
    return AccessScope.of(user.hotels)


def is_all_filter(requested_hotel: Optional[str]) -> bool:
    """``"all"`` and an absent filter mean the same thing."""
    return not requested_hotel or requested_hotel == ALL_HOTELS


class PermissionResolver:
    """
    Maps an identity (email or user id) to the hotels it may access.
    Resolved users are cached per identity for a bounded time.
    """

    def __init__(self, directory: UserDirectory, cache: Optional[TTLCache] = None):
        self.directory = directory
        self.cache = cache if cache is not None else TTLCache(
            ttl_seconds=settings.PERMISSION_CACHE_TTL_SECONDS,
            max_entries=settings.PERMISSION_CACHE_MAX_ENTRIES,
        )

    @staticmethod
    def _cache_key(identity: str) -> str:
        return f"user:{identity.strip().lower()}"

    async def resolve_user(self, identity: Optional[str]) -> Optional[User]:
        if not identity:
            return None

        key = self._cache_key(identity)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        user = await self.directory.lookup(identity.strip())
        if user is None:
            logger.info(f"No user found for identity {identity!r}, resolving to no access")
            return None

        self.cache.set(key, user)
        return user

    async def accessible_hotels(self, identity: Optional[str]) -> AccessScope:
        return scope_for(await self.resolve_user(identity))

    async def has_access(self, identity: Optional[str], hotel_id: str) -> bool:
        scope = await self.accessible_hotels(identity)
        return scope.contains(hotel_id)

    async def is_admin(self, identity: Optional[str]) -> bool:
        user = await self.resolve_user(identity)
        return bool(user and user.is_admin)

    async def filter_hotels(self, identity: Optional[str], hotel_ids: Iterable[str]) -> List[str]:
        """Keep only the hotel ids the identity may access, preserving order."""
        scope = await self.accessible_hotels(identity)
        return [hotel_id for hotel_id in hotel_ids if scope.contains(hotel_id)]

    def clear_user_cache(self):
        self.cache.clear()
