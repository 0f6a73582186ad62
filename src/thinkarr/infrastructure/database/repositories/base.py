"""Base repository."""

from typing import Any, Generic, TypeVar, cast

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Thin CRUD helpers shared by the concrete repositories.

    Repositories never commit; the caller owns the transaction.
    """

    model_class: type[T]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _base_query(self) -> Any:
        return select(cast(Any, self.model_class))

    async def get_by_id(self, id: Any) -> T | None:
        """Get entity by primary key."""
        return await self.session.get(self.model_class, id)

    async def create(self, entity: T) -> T:
        """Add a new entity and load server-side defaults."""
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def update(self, entity: T) -> T:
        """Flush pending changes of an existing entity."""
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def delete(self, entity: T) -> None:
        """Hard delete an entity."""
        await self.session.delete(entity)
        await self.session.flush()
