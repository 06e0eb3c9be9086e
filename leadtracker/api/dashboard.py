"""
Dashboard API routes.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from leadtracker.config import settings
from leadtracker.core.timestamps import parse_date_bound
from leadtracker.database import get_session
from leadtracker.services.metrics_service import MetricsService
from leadtracker.schemas.auth import Identity
from leadtracker.schemas.metrics import MetricsResponse
from leadtracker.api.deps import get_current_identity

router = APIRouter(prefix=settings.API_PREFIX, tags=["dashboard"])


@router.get("/metrics", response_model=MetricsResponse)
async def get_metrics(
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    identity: Identity = Depends(get_current_identity),
    session: AsyncSession = Depends(get_session)
):
    """Pipeline summary and status/source distributions."""
    from_ms = parse_date_bound(from_date, "fromDate")
    to_ms = parse_date_bound(to_date, "toDate", end_of_day=True)

    metrics_service = MetricsService(session)
    return await metrics_service.get_metrics(from_ms, to_ms)
