"""
Role hierarchy and record-level authorization rules.

Roles are a total order ("minimum clearance"): a role satisfies a
requirement when its level is at least the required role's level.
Everything here is pure; callers fetch the records and act on the Decision.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union

from leadtracker.models.lead import Lead, UNATTRIBUTED_USER_ID
from leadtracker.models.user import Role, User
from leadtracker.schemas.auth import Identity

logger = logging.getLogger(__name__)


ROLE_LEVELS = {
    Role.ADMINISTRATOR.value: 3,
    Role.SALES_MANAGER.value: 2,
    Role.SALES_REPRESENTATIVE.value: 1,
}


class Action(str, Enum):
    READ = "read"
    WRITE = "write"
    DELETE = "delete"


class DenialReason(str, Enum):
    NOT_OWNER = "not_owner"
    ROLE_TOO_LOW = "role_too_low"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[DenialReason] = None
    message: str = ""

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


def role_level(role: Union[str, Role, None]) -> int:
    """Level of a role; unknown roles rank below every real role."""
    if isinstance(role, Role):
        role = role.value
    return ROLE_LEVELS.get(role, 0)


def has_minimum_role(identity: Identity, required_roles: Iterable[Union[str, Role]]) -> bool:
    required = [role_level(r) for r in required_roles]
    if not required:
        return True
    return role_level(identity.role) >= min(required)


def is_privileged(identity: Identity) -> bool:
    """Sales Manager and above may act on any lead and manage users."""
    return has_minimum_role(identity, [Role.SALES_MANAGER])


def is_administrator(identity: Identity) -> bool:
    return has_minimum_role(identity, [Role.ADMINISTRATOR])


def is_lead_owner(identity: Identity, lead: Lead) -> bool:
    if lead.created_by_id == identity.id:
        return True
    if lead.created_by_id != UNATTRIBUTED_USER_ID:
        return False
    # Leads created before ids were stamped only carry the creator's display name
    if lead.created_by and lead.created_by == identity.name:
        logger.warning(
            f"Lead {lead.id} ownership matched by display name '{identity.name}'; "
            f"name-based ownership is deprecated"
        )
        return True
    return False


def _check_lead(identity: Identity, action: Action, lead: Lead) -> Decision:
    if action == Action.READ:
        return ALLOW
    if is_privileged(identity) or is_lead_owner(identity, lead):
        return ALLOW
    verb = "update" if action == Action.WRITE else "delete"
    return Decision(
        False,
        DenialReason.NOT_OWNER,
        f"You can only {verb} leads you created; this lead belongs to "
        f"{lead.created_by or 'another user'}",
    )


def _check_user(identity: Identity, action: Action, user: User) -> Decision:
    if action == Action.DELETE:
        if is_administrator(identity):
            return ALLOW
        return Decision(False, DenialReason.ROLE_TOO_LOW, "Only an Administrator can delete users")

    if user.id == identity.id or is_privileged(identity):
        return ALLOW
    verb = "view" if action == Action.READ else "update"
    return Decision(
        False,
        DenialReason.ROLE_TOO_LOW,
        f"Sales Manager role or higher is required to {verb} other users",
    )


def can_perform(identity: Identity, action: Action, resource: Union[Lead, User]) -> Decision:
    """Decide whether `identity` may perform `action` on a Lead or User record."""
    if isinstance(resource, Lead):
        return _check_lead(identity, action, resource)
    if isinstance(resource, User):
        return _check_user(identity, action, resource)
    raise TypeError(f"No authorization rules for {type(resource).__name__}")


def can_change_role(identity: Identity) -> bool:
    return is_administrator(identity)
