# ambient_tx/services/base_service.py
"""
Base class for all domain services
──────────────────────────────────────────────
Responsibilities:
    • Hold the patched data client shared by the service's repositories
    • Expose on_success() / execute_isolated() of the executor
    • Subclasses mark public methods with @transactional
──────────────────────────────────────────────
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable, TypeVar

from ambient_tx.db.tx import TransactionalExecutor, executor as default_executor

T = TypeVar("T")


class BaseService:
    """
    Base class for services.

    Methods decorated with @transactional join whatever transaction their
    caller already opened; repositories never see a session parameter.
    """

    def __init__(self, client: Any, executor: TransactionalExecutor | None = None):
        self.client = client
        self.executor = executor or default_executor

    def on_success(self, callback: Callable[[], T]) -> T | None:
        return self.executor.on_success(callback)

    async def execute_isolated(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Run fn outside the current transaction (it commits even if we roll back)."""
        return await self.executor.execute_isolated(fn)

    @property
    def in_transaction(self) -> bool:
        return self.executor.in_transaction()
