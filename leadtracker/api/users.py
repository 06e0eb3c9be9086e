"""
User management API routes.
"""
from fastapi import APIRouter, Depends, Response
from sqlmodel.ext.asyncio.session import AsyncSession

from leadtracker.config import settings
from leadtracker.database import get_session
from leadtracker.services.user_service import UserService
from leadtracker.schemas.auth import Identity
from leadtracker.schemas.user import UserResponse, UserListResponse, UserCreate, UserUpdate
from leadtracker.api.deps import get_current_identity, require_manager, require_administrator

router = APIRouter(prefix=f"{settings.API_PREFIX}/users", tags=["users"])


@router.get("", response_model=UserListResponse)
async def list_users(
    identity: Identity = Depends(require_manager),
    session: AsyncSession = Depends(get_session)
):
    """List users (Sales Manager or above)."""
    user_service = UserService(session)
    return {"users": await user_service.list()}


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    user_data: UserCreate,
    identity: Identity = Depends(require_administrator),
    session: AsyncSession = Depends(get_session)
):
    """Create a user (Administrator only)."""
    user_service = UserService(session)
    return await user_service.create(identity, user_data)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session)
):
    """Get a user (self, or Sales Manager and above)."""
    user_service = UserService(session)
    return await user_service.get(identity, user_id)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    user_data: UserUpdate,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session)
):
    """Update a user profile, password or role."""
    user_service = UserService(session)
    return await user_service.update(identity, user_id, user_data)


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: int,
    identity: Identity = Depends(require_administrator),
    session: AsyncSession = Depends(get_session)
):
    """Delete a user and its API keys (Administrator only)."""
    user_service = UserService(session)
    await user_service.delete(identity, user_id)
    return Response(status_code=204)
