# core/identity.py

from typing import Optional

from pydantic import ValidationError

from core.logging_config import logger
from core.storage import DocumentStore, Predicate
from models.user import User


USERS_COLLECTION = "users"


class UserDirectory:
    """Identity collaborator backed by the ``users`` collection."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def lookup_user_by_email(self, email: str) -> Optional[User]:
        if not email:
            return None
        rows = await self.store.query(
            USERS_COLLECTION,
            [Predicate.eq("email", email.strip().lower())],
            limit=1,
        )
        return self._to_user(rows[0]) if rows else None

    async def lookup_user_by_id(self, user_id: str) -> Optional[User]:
        if not user_id:
            return None
        row = await self.store.get(USERS_COLLECTION, user_id)
        return self._to_user(row) if row else None

    async def lookup(self, identity: str) -> Optional[User]:
        """Identity is either an email address or a user id."""
        if identity and "@" in identity:
            return await self.lookup_user_by_email(identity)
        return await self.lookup_user_by_id(identity)

    @staticmethod
    def _to_user(row: dict) -> Optional[User]:
        try:
            return User.model_validate(row)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed user record {row.get('id')}: {e.error_count()} error(s)")
            return None
