# ambient_tx/db/engine.py
"""
Async Engine / Session Factory construction
────────────────────────────────────────────
This module isolates engine/sessionmaker creation.

Used by:
    • db.client.Database (from_url / from_settings)
    • testing.fixtures (file-backed sqlite per test)
"""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

SQLITE_BUSY_TIMEOUT_S = 30


def normalize_async_url(url: str) -> str:
    if not url:
        raise RuntimeError("No DB URL provided.")
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def _apply_sqlite_pragmas(dbapi_connection) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.execute("PRAGMA journal_mode=WAL;")
    cursor.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_S * 1000};")
    cursor.close()


def create_engine_from_url(url: str, **kwargs) -> AsyncEngine:
    """Create an AsyncEngine; sqlite gets WAL + busy timeout so concurrent writers queue up."""
    url = normalize_async_url(url)
    is_sqlite = url.startswith("sqlite")

    engine = create_async_engine(
        url,
        pool_pre_ping=True,
        connect_args={"timeout": SQLITE_BUSY_TIMEOUT_S} if is_sqlite else {},
        **kwargs,
    )

    if is_sqlite:
        @event.listens_for(engine.sync_engine, "connect")
        def _on_connect(dbapi_connection, _connection_record) -> None:
            _apply_sqlite_pragmas(dbapi_connection)

    return engine


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
