"""Generic DAO base for local SQLModel tables."""

from collections.abc import Sequence
from typing import Any, TypeVar

from sqlalchemy import delete, func
from sqlalchemy import update as sql_update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select
from sqlmodel import SQLModel, select

from src.core.domain.exceptions import EntityNotFoundError

M = TypeVar("M", bound=SQLModel)


class SQLModelDao[M]:
    """Common CRUD operations over one table.

    DAO methods flush but never commit; the caller owns the transaction.
    Inserts replace an existing row with the same primary key. Bulk updates
    and deletes skip session synchronisation, so reads always refresh loaded
    instances from the database.
    """

    model: type[M]

    def __init__(self, session: AsyncSession):
        self.session = session

    # ==================== QUERIES ====================

    async def get_by_id(self, entity_id: str) -> M | None:
        return await self.session.get(self.model, entity_id, populate_existing=True)

    async def count(self) -> int:
        return await self._scalar(select(func.count()).select_from(self.model)) or 0

    # ==================== INSERTS ====================

    async def insert(self, entity: M) -> M:
        merged = await self.session.merge(entity)
        await self.session.flush()
        return merged

    async def insert_many(self, entities: Sequence[M]) -> list[M]:
        merged = [await self.session.merge(entity) for entity in entities]
        await self.session.flush()
        return merged

    # ==================== UPDATES ====================

    async def update(self, entity: M) -> M:
        identity = self._identity(entity)
        existing = await self.session.get(self.model, identity)
        if existing is None:
            raise EntityNotFoundError(self.model.__name__, str(identity))
        return await self.insert(entity)

    # ==================== DELETES ====================

    async def delete_by_id(self, entity_id: str) -> bool:
        pk = self._primary_key_column()
        return await self._delete_where(pk == entity_id) > 0

    async def clear_all(self) -> int:
        return await self._delete_where()

    # ==================== HELPERS ====================

    def _identity(self, entity: M) -> Any:
        return getattr(entity, self._primary_key_column().key)

    def _primary_key_column(self) -> Any:
        return self.model.__table__.primary_key.columns.values()[0]

    async def _all(self, statement: Select) -> list[M]:
        result = await self.session.execute(
            statement.execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def _first(self, statement: Select) -> M | None:
        result = await self.session.execute(
            statement.limit(1).execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def _scalar(self, statement: Select) -> Any:
        result = await self.session.execute(statement)
        return result.scalar()

    async def _execute_update(self, *criteria: Any, **values: Any) -> int:
        statement = (
            sql_update(self.model)
            .where(*criteria)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(statement)
        await self.session.flush()
        return result.rowcount or 0

    async def _delete_where(self, *criteria: Any) -> int:
        statement = delete(self.model).where(*criteria).execution_options(
            synchronize_session=False
        )
        result = await self.session.execute(statement)
        await self.session.flush()
        return result.rowcount or 0
