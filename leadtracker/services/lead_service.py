"""
Lead service - lead management with ownership checks and audit stamping.
"""
import logging
from typing import Optional, List

from sqlmodel.ext.asyncio.session import AsyncSession

from leadtracker.core.exceptions import NotFoundError, ForbiddenError
from leadtracker.core.permissions import Action, DenialReason, can_perform, is_administrator
from leadtracker.core.timestamps import now_ms
from leadtracker.models.lead import Lead
from leadtracker.repositories.lead_repo import LeadRepository
from leadtracker.schemas.auth import Identity
from leadtracker.schemas.lead import LeadCreate, LeadUpdate, LeadSearch

logger = logging.getLogger(__name__)


class LeadService:
    """Service for lead operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.lead_repo = LeadRepository(session)

    async def create(self, identity: Identity, lead_data: LeadCreate) -> Lead:
        """Create a lead owned by the calling identity."""
        data = lead_data.model_dump()
        timestamp = now_ms()
        data["created_at"] = timestamp
        data["updated_at"] = timestamp
        data["created_by"] = identity.name
        data["created_by_id"] = identity.id

        lead = await self.lead_repo.create(data)
        logger.info(f"Lead {lead.id} '{lead.name}' created by user {identity.id}")
        return lead

    async def get(self, lead_id: int) -> Lead:
        """Get a lead by ID."""
        lead = await self.lead_repo.get(lead_id)
        if not lead:
            raise NotFoundError("Lead", lead_id)
        return lead

    async def list(
        self,
        from_ms: Optional[int] = None,
        to_ms: Optional[int] = None
    ) -> List[Lead]:
        """List leads created within an inclusive date range."""
        return await self.lead_repo.list_by_date_range(from_ms, to_ms)

    async def search(self, criteria: Optional[LeadSearch] = None) -> List[Lead]:
        """Keyword or field search; no criteria returns every lead."""
        return await self.lead_repo.search(criteria)

    async def update(
        self,
        identity: Identity,
        lead_id: int,
        lead_data: LeadUpdate
    ) -> Lead:
        """Update a lead the caller owns (or any lead, for managers)."""
        lead = await self.get(lead_id)
        self._authorize(identity, Action.WRITE, lead)

        update_data = lead_data.model_dump(exclude_unset=True)
        update_data["updated_at"] = now_ms()

        updated_lead = await self.lead_repo.update(lead_id, update_data)
        if not updated_lead:
            raise NotFoundError("Lead", lead_id)

        changes = sorted(k for k in update_data if k != "updated_at")
        logger.info(f"Lead {lead_id} updated by user {identity.id}: {changes}")
        return updated_lead

    async def delete(self, identity: Identity, lead_id: int) -> bool:
        """Delete a lead the caller owns (or any lead, for managers)."""
        lead = await self.get(lead_id)
        self._authorize(identity, Action.DELETE, lead)

        success = await self.lead_repo.delete(lead_id)
        if not success:
            raise NotFoundError("Lead", lead_id)

        logger.info(f"Lead {lead_id} deleted by user {identity.id}")
        return success

    async def delete_all(self, identity: Identity) -> int:
        """Remove every lead. Administrator only."""
        if not is_administrator(identity):
            raise ForbiddenError(
                "Only an Administrator can delete all leads",
                reason=DenialReason.ROLE_TOO_LOW.value
            )

        count = await self.lead_repo.delete_all()
        logger.warning(f"All leads ({count}) deleted by user {identity.id}")
        return count

    def _authorize(self, identity: Identity, action: Action, lead: Lead) -> None:
        decision = can_perform(identity, action, lead)
        if not decision:
            logger.info(
                f"User {identity.id} denied {action.value} on lead {lead.id}: {decision.reason.value}"
            )
            raise ForbiddenError(decision.message, reason=decision.reason.value)
