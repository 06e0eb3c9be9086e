"""
API key management routes (Administrator only).
"""
from fastapi import APIRouter, Depends, Response
from sqlmodel.ext.asyncio.session import AsyncSession

from leadtracker.config import settings
from leadtracker.database import get_session
from leadtracker.services.api_key_service import ApiKeyService
from leadtracker.schemas.auth import Identity
from leadtracker.schemas.api_key import (
    ApiKeyCreate, ApiKeyUpdate, ApiKeyEnvelope, ApiKeyListResponse
)
from leadtracker.api.deps import require_administrator

router = APIRouter(prefix=f"{settings.API_PREFIX}/api-keys", tags=["api-keys"])


@router.get("", response_model=ApiKeyListResponse)
async def list_api_keys(
    identity: Identity = Depends(require_administrator),
    session: AsyncSession = Depends(get_session)
):
    """List API keys with masked tokens."""
    api_key_service = ApiKeyService(session)
    return {"api_keys": await api_key_service.list()}


@router.post("", response_model=ApiKeyEnvelope, status_code=201)
async def create_api_key(
    key_data: ApiKeyCreate,
    identity: Identity = Depends(require_administrator),
    session: AsyncSession = Depends(get_session)
):
    """Issue a key for a user. The full token is returned once here."""
    api_key_service = ApiKeyService(session)
    return {"api_key": await api_key_service.create(identity, key_data)}


@router.get("/{key_id}/full", response_model=ApiKeyEnvelope)
async def get_full_api_key(
    key_id: int,
    identity: Identity = Depends(require_administrator),
    session: AsyncSession = Depends(get_session)
):
    """Get a key with its full token."""
    api_key_service = ApiKeyService(session)
    return {"api_key": await api_key_service.get_full(key_id)}


@router.patch("/{key_id}", response_model=ApiKeyEnvelope)
async def update_api_key(
    key_id: int,
    key_data: ApiKeyUpdate,
    identity: Identity = Depends(require_administrator),
    session: AsyncSession = Depends(get_session)
):
    """Activate or deactivate a key."""
    api_key_service = ApiKeyService(session)
    return {"api_key": await api_key_service.set_active(identity, key_id, key_data.is_active)}


@router.delete("/{key_id}", status_code=204)
async def delete_api_key(
    key_id: int,
    identity: Identity = Depends(require_administrator),
    session: AsyncSession = Depends(get_session)
):
    """Delete a key."""
    api_key_service = ApiKeyService(session)
    await api_key_service.delete(identity, key_id)
    return Response(status_code=204)
