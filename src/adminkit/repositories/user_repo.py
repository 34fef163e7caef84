"""User and API key repository."""

import hashlib
import secrets
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from adminkit.config import settings
from adminkit.models.user import ApiKey, User

API_KEY_PREFIX = "ak_"


def hash_api_key(raw_key: str) -> str:
    """SHA256 of the salted key, as stored in api_keys.key_hash."""
    return hashlib.sha256(f"{settings.api_key_salt}{raw_key}".encode("utf-8")).hexdigest()


class UserRepository:
    """Repository for users and their API keys."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, email: str, full_name: str | None = None, is_superuser: bool = False) -> User:
        """Create a new user."""
        user = User(email=email, full_name=full_name, is_active=True, is_superuser=is_superuser)
        self.db.add(user)
        await self.db.flush()
        return user

    async def create_api_key(self, user: User, name: str) -> tuple[ApiKey, str]:
        """Issue a new key; the raw key is only ever returned here."""
        raw_key = f"{API_KEY_PREFIX}{secrets.token_urlsafe(32)}"
        api_key = ApiKey(
            user_id=user.id,
            key_hash=hash_api_key(raw_key),
            key_prefix=raw_key[:10],
            name=name,
            is_active=True,
        )
        self.db.add(api_key)
        await self.db.flush()
        return api_key, raw_key

    async def get_by_api_key(self, raw_key: str) -> ApiKey | None:
        """Look up an active, unexpired key together with its user."""
        result = await self.db.execute(
            select(ApiKey)
            .options(selectinload(ApiKey.user))
            .where(ApiKey.key_hash == hash_api_key(raw_key), ApiKey.is_active.is_(True))
        )
        api_key = result.scalar_one_or_none()

        if api_key is None or api_key.is_expired or not api_key.user.is_active:
            return None

        api_key.last_used_at = datetime.now(timezone.utc)
        await self.db.flush()

        return api_key
