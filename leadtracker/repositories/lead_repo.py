"""
Lead repository with search and date-range queries.
"""
from typing import Optional, List

from sqlmodel import select, or_, and_
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import delete

from leadtracker.models.lead import Lead
from leadtracker.repositories.base import BaseRepository
from leadtracker.schemas.lead import LeadSearch


# Columns matched by a free-text keyword
KEYWORD_FIELDS = (
    "name",
    "project_name",
    "company",
    "end_user_organization",
    "product",
    "email",
    "phone",
    "end_user_contact",
)

# Columns that can be filtered individually (combined with AND)
FILTER_FIELDS = (
    "name",
    "project_name",
    "end_user_organization",
    "company",
    "product",
)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class LeadRepository(BaseRepository[Lead]):
    """Repository for Lead operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Lead, session)

    async def list_by_date_range(
        self,
        from_ms: Optional[int] = None,
        to_ms: Optional[int] = None
    ) -> List[Lead]:
        """Leads created within [from_ms, to_ms]; a missing bound is open."""
        query = select(Lead)
        if from_ms is not None:
            query = query.where(Lead.created_at >= from_ms)
        if to_ms is not None:
            query = query.where(Lead.created_at <= to_ms)

        query = query.order_by(Lead.created_at.desc(), Lead.id.desc())
        result = await self.session.exec(query)
        return list(result.all())

    async def search(self, criteria: Optional[LeadSearch] = None) -> List[Lead]:
        """
        Case-insensitive substring search.
        A keyword matches any of KEYWORD_FIELDS; otherwise every given
        field filter must match.
        """
        query = select(Lead)

        if criteria:
            keyword = _clean(criteria.keyword)
            if keyword:
                query = query.where(
                    or_(*[
                        getattr(Lead, field).icontains(keyword, autoescape=True)
                        for field in KEYWORD_FIELDS
                    ])
                )
            else:
                conditions = []
                for field in FILTER_FIELDS:
                    value = _clean(getattr(criteria, field))
                    if value:
                        conditions.append(getattr(Lead, field).icontains(value, autoescape=True))
                if conditions:
                    query = query.where(and_(*conditions))

        query = query.order_by(Lead.created_at.desc(), Lead.id.desc())
        result = await self.session.exec(query)
        return list(result.all())

    async def delete_all(self) -> int:
        """Delete every lead. Returns the number of rows removed."""
        result = await self.session.exec(delete(Lead))
        await self.session.commit()
        return result.rowcount or 0
