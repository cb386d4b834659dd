# ambient_tx/db/client.py
"""
Transactional data client on SQLAlchemy asyncio
──────────────────────────────────────────────
Two implementations behind one operation surface:

    • Database          → raw client; every call runs in its own
                          short-lived session and commits immediately
    • TransactionClient → session handle; every call runs on one
                          AsyncSession owned by an open transaction

Database.transaction() is the transaction-opening operation the proxy
redirects while an ambient session is active.
"""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, Sequence, Type, TypeVar

from sqlalchemy import MetaData, delete, func, select, update
from sqlalchemy.engine import Result
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ambient_tx.db.context import maybe_await
from ambient_tx.db.engine import create_engine_from_url, create_sessionmaker

T = TypeVar("T")
M = TypeVar("M")


class DataClient:
    """Shared data-access surface. Subclasses decide which session a call runs on."""

    def _scope(self) -> Any:
        raise NotImplementedError

    async def execute(self, statement, params=None) -> Result:
        async with self._scope() as session:
            return await session.execute(statement, params)

    async def scalar(self, statement, params=None) -> Any:
        async with self._scope() as session:
            return await session.scalar(statement, params)

    async def scalars(self, statement, params=None) -> list:
        async with self._scope() as session:
            res = await session.scalars(statement, params)
            return list(res.all())

    async def get(self, model: Type[M], ident: Any) -> Optional[M]:
        async with self._scope() as session:
            return await session.get(model, ident)

    async def add(self, obj: M) -> M:
        async with self._scope() as session:
            session.add(obj)
            await session.flush()  # populate PKs
            return obj

    async def create(self, model: Type[M], **values) -> M:
        return await self.add(model(**values))

    async def execute_rowcount(self, statement, params=None) -> int:
        """Run an UPDATE/DELETE and return the number of matched rows."""
        async with self._scope() as session:
            res = await session.execute(statement, params)
            return int(res.rowcount or 0)

    async def update(self, model: Type[Any], ident: Any, **values) -> int:
        return await self.execute_rowcount(update(model).where(model.id == ident).values(**values))

    async def delete(self, model: Type[Any], ident: Any) -> int:
        return await self.execute_rowcount(delete(model).where(model.id == ident))

    async def count(self, model: Type[Any], where=None) -> int:
        stmt = select(func.count()).select_from(model)
        if where is not None:
            stmt = stmt.where(where)
        return int(await self.scalar(stmt))


class TransactionClient(DataClient):
    """Handle to one open transaction. Never commits; the owner of the transaction does."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def _scope(self) -> AsyncIterator[AsyncSession]:
        yield self.session

    def __repr__(self) -> str:
        return f"<TransactionClient session={id(self.session):#x}>"


class Database(DataClient):
    def __init__(
        self,
        engine: AsyncEngine,
        sessionmaker: async_sessionmaker[AsyncSession] | None = None,
    ):
        self.engine = engine
        self.sessionmaker = sessionmaker or create_sessionmaker(engine)

    @classmethod
    def from_url(cls, url: str, **engine_kwargs) -> "Database":
        return cls(create_engine_from_url(url, **engine_kwargs))

    @classmethod
    def from_settings(cls, settings) -> "Database":
        return cls.from_url(settings.DB_URL)

    @asynccontextmanager
    async def _scope(self) -> AsyncIterator[AsyncSession]:
        async with self.sessionmaker() as session, session.begin():
            yield session

    async def transaction(
        self,
        fn_or_batch: Callable[[TransactionClient], Awaitable[T]] | Sequence[Any],
        *,
        isolation_level: str | None = None,
        timeout: float | None = None,
    ) -> Any:
        """
        Run a unit of work (or a batch of statements) in one transaction.

        Callable form: fn(TransactionClient) is awaited with at most `timeout`
        seconds; commit on success, rollback on any error (timeouts included).
        Batch form: statements run in order, the list of results is returned.
        """
        async with self.sessionmaker() as session:
            async with session.begin():
                if isolation_level:
                    await session.connection(
                        execution_options={"isolation_level": isolation_level}
                    )
                if callable(fn_or_batch):
                    tx = TransactionClient(session)
                    return await asyncio.wait_for(maybe_await(fn_or_batch(tx)), timeout)
                return [await session.execute(stmt) for stmt in fn_or_batch]

    async def create_all(self, metadata: MetaData) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()

    def __repr__(self) -> str:
        return f"<Database url={self.engine.url!r}>"
