"""
Generic async CRUD shared by the lead, user and API key repositories.
Single-record writes commit immediately; multi-step changes use the session directly.
"""
from typing import TypeVar, Generic, Type, Optional, List

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """Inherit and pass the table model."""

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    def _where(self, query, criteria: Optional[dict]):
        for field, value in (criteria or {}).items():
            if value is not None and hasattr(self.model, field):
                query = query.where(getattr(self.model, field) == value)
        return query

    async def create(self, values: dict) -> ModelType:
        record = self.model(**values)
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def get(self, record_id: int) -> Optional[ModelType]:
        return await self.session.get(self.model, record_id)

    async def find_one(self, **criteria) -> Optional[ModelType]:
        """First record whose columns equal every given value."""
        result = await self.session.exec(self._where(select(self.model), criteria))
        return result.first()

    async def list(
        self,
        criteria: Optional[dict] = None,
        order_by: str = "id",
        order_desc: bool = False
    ) -> List[ModelType]:
        query = self._where(select(self.model), criteria)
        column = getattr(self.model, order_by)
        query = query.order_by(column.desc() if order_desc else column)

        result = await self.session.exec(query)
        return list(result.all())

    async def update(self, record_id: int, values: dict) -> Optional[ModelType]:
        """Apply `values` to a record. Keys absent from `values` are left as they are."""
        record = await self.get(record_id)
        if record is None:
            return None

        for field, value in values.items():
            setattr(record, field, value)

        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def delete(self, record_id: int) -> bool:
        record = await self.get(record_id)
        if record is None:
            return False

        await self.session.delete(record)
        await self.session.commit()
        return True
