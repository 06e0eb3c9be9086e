"""
Metrics service - lead pipeline aggregation for the dashboard.

The aggregation itself is a pure function over a list of leads so it can be
reused on any already-filtered collection.
"""
import math
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from leadtracker.models.lead import Lead, LeadSource, LeadStatus
from leadtracker.repositories.lead_repo import LeadRepository

_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_LEADING_FLOAT = re.compile(r"^-?(\d+(\.\d*)?|\.\d+)")


def parse_numeric(value: Optional[str]) -> float:
    """
    Best-effort number from a formatted budget string.

    Everything except digits, '.' and '-' is stripped ("฿1,000,000" ->
    "1000000"), then the longest leading float is read. Nothing readable -> 0.
    """
    if not value:
        return 0.0
    cleaned = _NON_NUMERIC.sub("", value)
    match = _LEADING_FLOAT.match(cleaned)
    if not match:
        return 0.0
    return float(match.group(0))


def _percentage(count: int, total: int) -> int:
    if total <= 0:
        return 0
    # half-up, not banker's rounding
    return math.floor(count / total * 100 + 0.5)


def _one_decimal(value: float) -> str:
    return str(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def compute_metrics(leads: Iterable[Lead]) -> dict:
    """Summary counts, conversion rate, total budget and status/source distributions."""
    leads = list(leads)
    total = len(leads)

    status_counts = {status.value: 0 for status in LeadStatus}
    source_counts = {source.value: 0 for source in LeadSource}
    total_budget = 0.0

    for lead in leads:
        if lead.status in status_counts:
            status_counts[lead.status] += 1
        if lead.source in source_counts:
            source_counts[lead.source] += 1
        total_budget += parse_numeric(lead.budget)

    converted = status_counts[LeadStatus.CONVERTED.value]
    conversion_rate = _one_decimal(converted / total * 100) if total > 0 else "0.0"

    return {
        "metrics": {
            "total": total,
            "new": status_counts[LeadStatus.NEW.value],
            "qualified": status_counts[LeadStatus.QUALIFIED.value],
            "in_progress": status_counts[LeadStatus.IN_PROGRESS.value],
            "converted": converted,
            "conversion_rate": conversion_rate,
            "total_budget": total_budget,
        },
        "status_distribution": [
            {"status": status, "count": count, "percentage": _percentage(count, total)}
            for status, count in status_counts.items()
        ],
        "source_distribution": [
            {"source": source, "count": count, "percentage": _percentage(count, total)}
            for source, count in source_counts.items()
        ],
    }


class MetricsService:
    """Service for dashboard metrics."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.lead_repo = LeadRepository(session)

    async def get_metrics(
        self,
        from_ms: Optional[int] = None,
        to_ms: Optional[int] = None
    ) -> dict:
        leads = await self.lead_repo.list_by_date_range(from_ms, to_ms)
        return compute_metrics(leads)
