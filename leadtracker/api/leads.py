"""
Leads API routes (dashboard).
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response
from sqlmodel.ext.asyncio.session import AsyncSession

from leadtracker.config import settings
from leadtracker.core.timestamps import parse_date_bound
from leadtracker.database import get_session
from leadtracker.services.lead_service import LeadService
from leadtracker.schemas.auth import Identity
from leadtracker.schemas.lead import (
    LeadCreate, LeadUpdate, LeadEnvelope, LeadListResponse
)
from leadtracker.api.deps import get_current_identity, require_administrator

router = APIRouter(prefix=f"{settings.API_PREFIX}/leads", tags=["leads"])


@router.get("", response_model=LeadListResponse)
async def list_leads(
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session)
):
    """List leads, optionally limited to an inclusive creation date range."""
    from_ms = parse_date_bound(from_date, "fromDate")
    to_ms = parse_date_bound(to_date, "toDate", end_of_day=True)

    lead_service = LeadService(session)
    leads = await lead_service.list(from_ms, to_ms)
    return {"leads": leads}


@router.post("", response_model=LeadEnvelope, status_code=201)
async def create_lead(
    lead_data: LeadCreate,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session)
):
    """Create a new lead owned by the caller."""
    lead_service = LeadService(session)
    lead = await lead_service.create(identity, lead_data)
    return {"lead": lead}


@router.delete("", status_code=204)
async def delete_all_leads(
    identity: Identity = Depends(require_administrator),
    session: AsyncSession = Depends(get_session)
):
    """Delete every lead (Administrator only)."""
    lead_service = LeadService(session)
    await lead_service.delete_all(identity)
    return Response(status_code=204)


@router.get("/{lead_id}", response_model=LeadEnvelope)
async def get_lead(
    lead_id: int,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session)
):
    """Get a lead by ID."""
    lead_service = LeadService(session)
    return {"lead": await lead_service.get(lead_id)}


@router.patch("/{lead_id}", response_model=LeadEnvelope)
async def update_lead(
    lead_id: int,
    lead_data: LeadUpdate,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session)
):
    """Update a lead."""
    lead_service = LeadService(session)
    lead = await lead_service.update(identity, lead_id, lead_data)
    return {"lead": lead}


@router.delete("/{lead_id}", status_code=204)
async def delete_lead(
    lead_id: int,
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session)
):
    """Delete a lead."""
    lead_service = LeadService(session)
    await lead_service.delete(identity, lead_id)
    return Response(status_code=204)
