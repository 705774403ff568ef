# testgenium/db/repositories/base.py
from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from testgenium.core.errors import StoreConflict

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType]):
    """Base repository with common CRUD operations"""

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def get(self, id: Any) -> Optional[ModelType]:
        """Get by ID"""
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)
        )
        return result.scalar_one_or_none()

    async def create(self, obj_in: dict, commit: bool = True) -> ModelType:
        """
        Create new record.

        With ``commit=False`` the row is only flushed, so the caller can
        commit it together with other writes in the same transaction.
        """
        db_obj = self.model(**obj_in)
        self.session.add(db_obj)
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            raise StoreConflict(f"{self.model.__name__} already exists") from e

        if commit:
            await self.session.commit()
            await self.session.refresh(db_obj)
        return db_obj
