"""
API key repository.
"""
from typing import Optional, List, Tuple

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from leadtracker.models.api_key import ApiKey
from leadtracker.models.user import User
from leadtracker.repositories.base import BaseRepository


class ApiKeyRepository(BaseRepository[ApiKey]):
    """Repository for ApiKey operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(ApiKey, session)

    async def get_by_key(self, key: str) -> Optional[ApiKey]:
        return await self.find_one(key=key)

    async def list_with_owners(self) -> List[Tuple[ApiKey, Optional[User]]]:
        """All keys, newest first, each paired with its owning user."""
        query = (
            select(ApiKey, User)
            .join(User, User.id == ApiKey.user_id, isouter=True)
            .order_by(ApiKey.created_at.desc(), ApiKey.id.desc())
        )
        result = await self.session.exec(query)
        return list(result.all())

    async def touch(self, api_key: ApiKey, used_at: int) -> ApiKey:
        """Record a successful authentication."""
        api_key.last_used = used_at
        self.session.add(api_key)
        await self.session.commit()
        await self.session.refresh(api_key)
        return api_key
