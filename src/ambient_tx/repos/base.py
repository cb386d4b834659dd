"""
Generic Repository Base
────────────────────────────────────────────
Focus:
    • CRUD operations through a (usually patched) data client
    • No session parameters: calls land in the ambient transaction
      when one is active, otherwise they autocommit on the raw client
    • Bulk helpers (update_where, delete_where, first_where, exists_where)
────────────────────────────────────────────
"""
from __future__ import annotations

from typing import Any, Generic, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, select, update

T = TypeVar("T")


class RepoBase(Generic[T]):
    """Generic repository providing async CRUD + query helpers."""

    # Each subclass must set this:
    model: Optional[Type[T]] = None

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if cls.model is None:
            raise RuntimeError(f"{cls.__name__} must define class attr `model`")

    def __init__(self, client: Any):
        self.client = client

    # ------------------------------------------------------------------
    # CRUD operations
    # ------------------------------------------------------------------
    async def get(self, id_: Any) -> Optional[T]:
        return await self.client.get(self.model, id_)

    async def list(
        self, *, where=None, order_by=None, limit: Optional[int] = None, offset: int = 0
    ) -> Sequence[T]:
        stmt = select(self.model)
        if where is not None:
            items = where if isinstance(where, (list, tuple)) else [where]
            for cond in items:
                stmt = stmt.where(cond)
        if order_by is not None:
            items = order_by if isinstance(order_by, (list, tuple)) else [order_by]
            stmt = stmt.order_by(*items)
        if limit:
            stmt = stmt.limit(limit).offset(offset)
        return await self.client.scalars(stmt)

    async def create(self, **values) -> T:
        return await self.client.create(self.model, **values)

    async def update(self, id_: Any, **values) -> int:
        return await self.client.update(self.model, id_, **values)

    async def delete(self, id_: Any) -> int:
        return await self.client.delete(self.model, id_)

    async def count(self, where=None) -> int:
        return await self.client.count(self.model, where)

    # ------------------------------------------------------------------
    # Extended helpers
    # ------------------------------------------------------------------
    async def first_where(self, where) -> Optional[T]:
        stmt = select(self.model).where(where).limit(1)
        return await self.client.scalar(stmt)

    async def exists_where(self, where) -> bool:
        return (await self.first_where(where)) is not None

    async def update_where(self, where, **values) -> int:
        return await self.client.execute_rowcount(update(self.model).where(where).values(**values))

    async def delete_where(self, where=None) -> int:
        stmt = delete(self.model)
        if where is not None:
            stmt = stmt.where(where)
        return await self.client.execute_rowcount(stmt)
