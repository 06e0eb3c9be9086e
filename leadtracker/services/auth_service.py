"""
Authentication service - login and identity resolution for the dashboard.
"""
import logging
from typing import Optional, Tuple

from sqlmodel.ext.asyncio.session import AsyncSession

from leadtracker.config import settings
from leadtracker.core.exceptions import UnauthorizedError
from leadtracker.core.security import (
    create_access_token,
    get_password_hash,
    is_password_hash,
    verify_legacy_password,
    verify_password,
    verify_access_token,
)
from leadtracker.models.user import User
from leadtracker.repositories.user_repo import UserRepository
from leadtracker.schemas.auth import Identity

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


def identity_for(user: User) -> Identity:
    return Identity(id=user.id, role=user.role, name=user.name)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)

    async def login(self, username: str, password: str) -> Tuple[User, str]:
        """Authenticate a user and return it with a signed access token."""
        user = await self.user_repo.get_by_username(username)
        if not user:
            logger.warning(f"Login failed for unknown username '{username}'")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not await self._check_password(user, password):
            logger.warning(f"Login failed for user {user.id} '{username}'")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        token = create_access_token({
            "sub": user.username,
            "user_id": user.id,
            "role": user.role,
            "name": user.name,
        })
        logger.info(f"User {user.id} '{username}' logged in")
        return user, token

    async def identity_from_token(self, token: str) -> Identity:
        """
        Resolve a bearer token.
        The user is re-read so deleted users are rejected and role changes apply immediately.
        """
        payload = verify_access_token(token)
        if not payload:
            raise UnauthorizedError("Could not validate credentials")

        try:
            user_id = int(payload["user_id"])
        except (KeyError, TypeError, ValueError):
            raise UnauthorizedError("Could not validate credentials")

        user = await self.user_repo.get(user_id)
        if not user:
            raise UnauthorizedError("User not found")
        return identity_for(user)

    def identity_from_headers(
        self,
        user_id: Optional[str],
        role: Optional[str],
        name: Optional[str]
    ) -> Optional[Identity]:
        """
        Legacy dashboard identity asserted through X-User-* headers.
        Nothing verifies these values; only used when TRUST_IDENTITY_HEADERS is on.
        Returns None unless all three headers are present.
        """
        if not (user_id and role and name):
            return None
        try:
            parsed_id = int(user_id)
        except ValueError:
            raise UnauthorizedError("Invalid X-User-ID header")

        logger.debug(f"Trusting asserted identity headers for user {parsed_id}")
        return Identity(id=parsed_id, role=role, name=name)

    async def fallback_identity(self) -> Optional[Identity]:
        """Development-only identity used when a request carries no credentials."""
        if settings.DEV_FALLBACK_USER_ID is None:
            return None

        user = await self.user_repo.get(settings.DEV_FALLBACK_USER_ID)
        if not user:
            logger.error(f"DEV_FALLBACK_USER_ID={settings.DEV_FALLBACK_USER_ID} does not match any user")
            return None

        logger.warning(f"Request without credentials resolved to fallback user {user.id}")
        return identity_for(user)

    async def _check_password(self, user: User, password: str) -> bool:
        if is_password_hash(user.password):
            return verify_password(password, user.password)

        # Row written before passwords were hashed
        if not settings.ALLOW_LEGACY_PLAINTEXT_PASSWORDS:
            logger.warning(f"User {user.id} has an unhashed password and legacy passwords are disabled")
            return False
        if not verify_legacy_password(password, user.password):
            return False

        await self.user_repo.update_password(user.id, get_password_hash(password))
        logger.warning(f"Upgraded legacy plaintext password for user {user.id}")
        return True
