"""
User repository.
"""
from typing import Optional, List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import delete

from leadtracker.models.api_key import ApiKey
from leadtracker.models.user import User, Role
from leadtracker.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_username(self, username: str) -> Optional[User]:
        return await self.find_one(username=username)

    async def update_password(self, user_id: int, password_hash: str) -> bool:
        return await self.update(user_id, {"password": password_hash}) is not None

    async def lock_administrator_ids(self) -> List[int]:
        """
        Ids of all Administrators, row-locked for the rest of the transaction.
        Callers must commit or roll back.
        """
        query = (
            select(User.id)
            .where(User.role == Role.ADMINISTRATOR.value)
            .with_for_update()
        )
        result = await self.session.exec(query)
        return list(result.all())

    async def delete_with_api_keys(self, user: User) -> None:
        """Remove a user and the keys it owns. Does not commit."""
        await self.session.exec(delete(ApiKey).where(ApiKey.user_id == user.id))
        await self.session.delete(user)
        await self.session.flush()
