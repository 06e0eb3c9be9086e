"""
API key service - key lifecycle and key-based authentication.
"""
import logging
from typing import List

from sqlmodel.ext.asyncio.session import AsyncSession

from leadtracker.core.exceptions import NotFoundError, UnauthorizedError
from leadtracker.core.security import generate_api_key, mask_api_key
from leadtracker.core.timestamps import now_ms
from leadtracker.models.api_key import ApiKey
from leadtracker.repositories.api_key_repo import ApiKeyRepository
from leadtracker.repositories.user_repo import UserRepository
from leadtracker.schemas.api_key import ApiKeyCreate, ApiKeyResponse
from leadtracker.schemas.auth import Identity

logger = logging.getLogger(__name__)


class ApiKeyService:
    """Service for API key operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.api_key_repo = ApiKeyRepository(session)
        self.user_repo = UserRepository(session)

    async def list(self) -> List[ApiKeyResponse]:
        """All keys with the token masked."""
        rows = await self.api_key_repo.list_with_owners()
        return [
            ApiKeyResponse(
                id=api_key.id,
                key=mask_api_key(api_key.key),
                name=api_key.name,
                user_id=api_key.user_id,
                user_name=owner.name if owner else None,
                created_at=api_key.created_at,
                last_used=api_key.last_used,
                is_active=api_key.is_active,
            )
            for api_key, owner in rows
        ]

    async def get_full(self, key_id: int) -> ApiKeyResponse:
        """A single key including the full token."""
        api_key = await self._get_or_404(key_id)
        return await self._to_response(api_key)

    async def create(self, identity: Identity, key_data: ApiKeyCreate) -> ApiKeyResponse:
        """Issue a new key for an existing user."""
        owner = await self.user_repo.get(key_data.user_id)
        if not owner:
            raise NotFoundError("User", key_data.user_id)

        api_key = await self.api_key_repo.create({
            "key": generate_api_key(),
            "name": key_data.name,
            "user_id": owner.id,
            "created_at": now_ms(),
            "is_active": True,
        })
        logger.info(f"API key {api_key.id} '{api_key.name}' issued to user {owner.id} by user {identity.id}")
        return await self._to_response(api_key)

    async def set_active(self, identity: Identity, key_id: int, is_active: bool) -> ApiKeyResponse:
        """Enable or disable a key without deleting it."""
        await self._get_or_404(key_id)
        api_key = await self.api_key_repo.update(key_id, {"is_active": is_active})
        state = "enabled" if is_active else "disabled"
        logger.info(f"API key {key_id} {state} by user {identity.id}")
        return await self._to_response(api_key)

    async def delete(self, identity: Identity, key_id: int) -> bool:
        """Revoke a key permanently."""
        success = await self.api_key_repo.delete(key_id)
        if not success:
            raise NotFoundError("API key", key_id)
        logger.info(f"API key {key_id} deleted by user {identity.id}")
        return success

    async def authenticate(self, key: str) -> Identity:
        """
        Resolve the identity behind an API key.
        Stamps `last_used` on every successful call.
        """
        if not key:
            raise UnauthorizedError("API key is required")

        api_key = await self.api_key_repo.get_by_key(key)
        if not api_key:
            logger.warning("Rejected request with unknown API key")
            raise UnauthorizedError("Invalid API key")
        if not api_key.is_active:
            logger.warning(f"Rejected request with inactive API key {api_key.id}")
            raise UnauthorizedError("API key is inactive")

        owner = await self.user_repo.get(api_key.user_id)
        if not owner:
            raise UnauthorizedError("Invalid API key")

        await self.api_key_repo.touch(api_key, now_ms())
        return Identity(id=owner.id, role=owner.role, name=owner.name)

    async def _get_or_404(self, key_id: int) -> ApiKey:
        api_key = await self.api_key_repo.get(key_id)
        if not api_key:
            raise NotFoundError("API key", key_id)
        return api_key

    async def _to_response(self, api_key: ApiKey) -> ApiKeyResponse:
        owner = await self.user_repo.get(api_key.user_id)
        return ApiKeyResponse(
            id=api_key.id,
            key=api_key.key,
            name=api_key.name,
            user_id=api_key.user_id,
            user_name=owner.name if owner else None,
            created_at=api_key.created_at,
            last_used=api_key.last_used,
            is_active=api_key.is_active,
        )
