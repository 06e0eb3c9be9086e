"""
User service - user management with role gates and the last-administrator guard.
"""
import asyncio
import logging
import weakref
from typing import List

from sqlmodel.ext.asyncio.session import AsyncSession

from leadtracker.core.exceptions import (
    NotFoundError,
    ForbiddenError,
    ConflictError,
    AlreadyExistsError,
)
from leadtracker.core.permissions import (
    Action,
    DenialReason,
    can_perform,
    can_change_role,
    is_administrator,
)
from leadtracker.core.security import get_password_hash
from leadtracker.models.user import User, Role
from leadtracker.repositories.user_repo import UserRepository
from leadtracker.schemas.auth import Identity
from leadtracker.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)

# Serializes every change that could leave the system without an Administrator.
# The row locks taken inside the transaction cover multi-process deployments.
_administrator_guards: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock]" = weakref.WeakKeyDictionary()


def _administrator_guard() -> asyncio.Lock:
    loop = asyncio.get_running_loop()
    lock = _administrator_guards.get(loop)
    if lock is None:
        lock = _administrator_guards[loop] = asyncio.Lock()
    return lock


LAST_ADMIN_MESSAGE = "Cannot remove the last Administrator"


class UserService:
    """Service for user operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repo = UserRepository(session)

    async def list(self) -> List[User]:
        """List all users."""
        return await self.user_repo.list()

    async def get(self, identity: Identity, user_id: int) -> User:
        """Get a user; non-managers may only read themselves."""
        user = await self._get_or_404(user_id)
        self._authorize(identity, Action.READ, user)
        return user

    async def create(self, identity: Identity, user_data: UserCreate) -> User:
        """Create a user. Administrator only."""
        if not is_administrator(identity):
            raise ForbiddenError(
                "Only an Administrator can create users",
                reason=DenialReason.ROLE_TOO_LOW.value
            )

        existing = await self.user_repo.get_by_username(user_data.username)
        if existing:
            raise AlreadyExistsError("User", "username", user_data.username)

        data = user_data.model_dump()
        data["password"] = get_password_hash(user_data.password)
        user = await self.user_repo.create(data)

        logger.info(f"User {user.id} '{user.username}' ({user.role}) created by user {identity.id}")
        return user

    async def update(self, identity: Identity, user_id: int, user_data: UserUpdate) -> User:
        """Update a user; role changes require an Administrator."""
        user = await self._get_or_404(user_id)
        self._authorize(identity, Action.WRITE, user)

        # User columns are all NOT NULL; an explicit null leaves the field unchanged
        update_data = {k: v for k, v in user_data.model_dump(exclude_unset=True).items() if v is not None}

        if not update_data.get("password"):
            update_data.pop("password", None)
        else:
            update_data["password"] = get_password_hash(update_data["password"])

        new_username = update_data.get("username")
        if new_username and new_username != user.username:
            existing = await self.user_repo.get_by_username(new_username)
            if existing:
                raise AlreadyExistsError("User", "username", new_username)

        new_role = update_data.get("role")
        if new_role is not None and new_role != user.role:
            if not can_change_role(identity):
                raise ForbiddenError(
                    "Only an Administrator can change user roles",
                    reason=DenialReason.ROLE_TOO_LOW.value
                )
            if user.role == Role.ADMINISTRATOR.value:
                return await self._demote_administrator(identity, user, update_data)
        else:
            update_data.pop("role", None)

        updated_user = await self.user_repo.update(user_id, update_data)
        logger.info(f"User {user_id} updated by user {identity.id}: {sorted(update_data)}")
        return updated_user

    async def delete(self, identity: Identity, user_id: int) -> bool:
        """Delete a user and its API keys. Administrator only; never the last Administrator."""
        user = await self._get_or_404(user_id)
        self._authorize(identity, Action.DELETE, user)

        async with _administrator_guard():
            try:
                if user.role == Role.ADMINISTRATOR.value:
                    admin_ids = await self.user_repo.lock_administrator_ids()
                    if len(admin_ids) <= 1:
                        logger.warning(f"User {identity.id} tried to delete the last Administrator ({user_id})")
                        raise ConflictError(LAST_ADMIN_MESSAGE)
                await self.user_repo.delete_with_api_keys(user)
                await self.session.commit()
            except Exception:
                await self.session.rollback()
                raise

        logger.info(f"User {user_id} '{user.username}' deleted by user {identity.id}")
        return True

    async def _demote_administrator(self, identity: Identity, user: User, update_data: dict) -> User:
        async with _administrator_guard():
            try:
                admin_ids = await self.user_repo.lock_administrator_ids()
                if len(admin_ids) <= 1:
                    logger.warning(f"User {identity.id} tried to demote the last Administrator ({user.id})")
                    raise ConflictError(LAST_ADMIN_MESSAGE)
                for field, value in update_data.items():
                    setattr(user, field, value)
                self.session.add(user)
                await self.session.commit()
            except Exception:
                await self.session.rollback()
                raise

        await self.session.refresh(user)
        logger.info(f"User {user.id} demoted to {user.role} by user {identity.id}")
        return user

    async def _get_or_404(self, user_id: int) -> User:
        user = await self.user_repo.get(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    def _authorize(self, identity: Identity, action: Action, user: User) -> None:
        decision = can_perform(identity, action, user)
        if not decision:
            raise ForbiddenError(decision.message, reason=decision.reason.value)
