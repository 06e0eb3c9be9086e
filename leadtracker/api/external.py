"""
External integration API (v1), authenticated with X-API-Key.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from leadtracker.config import settings
from leadtracker.database import get_session
from leadtracker.services.lead_service import LeadService
from leadtracker.schemas.auth import Identity
from leadtracker.schemas.lead import (
    LeadCreate, LeadUpdate, LeadEnvelope, LeadSearch, LeadSearchResponse
)
from leadtracker.api.deps import get_api_key_identity

router = APIRouter(prefix=f"{settings.API_PREFIX}/v1/leads", tags=["external"])


@router.get("/search", response_model=LeadSearchResponse)
async def search_leads(
    keyword: Optional[str] = None,
    name: Optional[str] = None,
    project_name: Optional[str] = Query(None, alias="projectName"),
    company: Optional[str] = None,
    end_user_organization: Optional[str] = Query(None, alias="endUserOrganization"),
    product: Optional[str] = None,
    identity: Identity = Depends(get_api_key_identity),
    session: AsyncSession = Depends(get_session)
):
    """Search by keyword across all text fields, or by specific fields."""
    criteria = LeadSearch(
        keyword=keyword,
        name=name,
        project_name=project_name,
        company=company,
        end_user_organization=end_user_organization,
        product=product
    )

    lead_service = LeadService(session)
    leads = await lead_service.search(criteria)
    return {"data": leads, "total": len(leads)}


@router.post("", response_model=LeadEnvelope, status_code=201)
async def create_lead(
    lead_data: LeadCreate,
    identity: Identity = Depends(get_api_key_identity),
    session: AsyncSession = Depends(get_session)
):
    """Create a lead owned by the API key's user."""
    lead_service = LeadService(session)
    return {"lead": await lead_service.create(identity, lead_data)}


@router.patch("/{lead_id}", response_model=LeadEnvelope)
async def update_lead(
    lead_id: int,
    lead_data: LeadUpdate,
    identity: Identity = Depends(get_api_key_identity),
    session: AsyncSession = Depends(get_session)
):
    """Update a lead with the API key owner's permissions."""
    lead_service = LeadService(session)
    return {"lead": await lead_service.update(identity, lead_id, lead_data)}
