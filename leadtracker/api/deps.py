"""
API dependencies - shared across all routes.
"""
from typing import Optional

from fastapi import Depends, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials, APIKeyHeader
from sqlmodel.ext.asyncio.session import AsyncSession

from leadtracker.config import settings
from leadtracker.core.exceptions import UnauthorizedError, ForbiddenError
from leadtracker.core.permissions import DenialReason, has_minimum_role
from leadtracker.database import get_session
from leadtracker.models.user import Role
from leadtracker.schemas.auth import Identity
from leadtracker.services.api_key_service import ApiKeyService
from leadtracker.services.auth_service import AuthService


bearer_scheme = HTTPBearer(auto_error=False)
api_key_scheme = APIKeyHeader(name="X-API-Key", auto_error=False)


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    x_user_id: Optional[str] = Header(default=None, alias="X-User-ID"),
    x_user_role: Optional[str] = Header(default=None, alias="X-User-Role"),
    x_user_name: Optional[str] = Header(default=None, alias="X-User-Name"),
    session: AsyncSession = Depends(get_session)
) -> Identity:
    """
    Resolve the dashboard caller.
    Order: bearer token, then legacy identity headers (if enabled), then the
    development fallback user (if configured). Anything else is rejected.
    """
    auth_service = AuthService(session)

    if credentials:
        return await auth_service.identity_from_token(credentials.credentials)

    if settings.TRUST_IDENTITY_HEADERS:
        identity = auth_service.identity_from_headers(x_user_id, x_user_role, x_user_name)
        if identity:
            return identity

    identity = await auth_service.fallback_identity()
    if identity:
        return identity

    raise UnauthorizedError("Not authenticated")


async def get_api_key_identity(
    api_key: Optional[str] = Depends(api_key_scheme),
    session: AsyncSession = Depends(get_session)
) -> Identity:
    """Resolve the external caller from the X-API-Key header."""
    api_key_service = ApiKeyService(session)
    return await api_key_service.authenticate(api_key)


def require_roles(*roles: Role):
    """Route gate: caller must hold at least the lowest of `roles`."""
    names = ", ".join(role.value for role in roles)

    async def dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        if not has_minimum_role(identity, roles):
            raise ForbiddenError(
                f"This action requires one of the roles: {names}",
                reason=DenialReason.ROLE_TOO_LOW.value
            )
        return identity

    return dependency


require_manager = require_roles(Role.ADMINISTRATOR, Role.SALES_MANAGER)
require_administrator = require_roles(Role.ADMINISTRATOR)
