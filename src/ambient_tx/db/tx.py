# ambient_tx/db/tx.py
"""
Transactional executor + decorator for service methods
──────────────────────────────────────────────
• execute()          → join the ambient session or open a top-level one
• on_success()       → queue a callback until the top-level commit
• execute_isolated() → run work against the raw client, ignoring the ambient session
• @transactional     → wraps a method body in execute()

BE CAREFUL: every query inside a transaction shares one session and holds
its locks until the outermost boundary commits.
"""
from __future__ import annotations

from functools import wraps
from typing import Any, Awaitable, Callable, TypeVar

from ambient_tx.db.context import (
    ACTIVE_SESSION_KEY,
    REQUEST_SCOPE_KEY,
    SUCCESS_CALLBACKS_KEY,
    ExecutionContextStore,
    context_store,
    maybe_await,
)
from ambient_tx.db.manager import SessionManager, manager
from ambient_tx.logger import log_verbose

T = TypeVar("T")

UnitOfWork = Callable[[], Awaitable[T]]


class SessionSlot:
    """
    Holds the handle of one top-level transaction.

    Tasks spawned inside the transaction share the slot, so emptying it
    on exit detaches the handle for all of them.
    """

    __slots__ = ("session",)

    def __init__(self, session: Any):
        self.session = session


class TransactionalExecutor:
    def __init__(self, manager: SessionManager, store: ExecutionContextStore = context_store):
        self.manager = manager
        self.store = store

    @property
    def root(self) -> Any:
        """Raw client: queries through it never join the ambient session."""
        return self.manager.client

    @property
    def logger(self) -> Any:
        return self.manager.logger

    def active_session(self) -> Any:
        slot = self.store.get(ACTIVE_SESSION_KEY)
        return slot.session if slot is not None else None

    def in_transaction(self) -> bool:
        return self.active_session() is not None

    async def execute(self, fn: UnitOfWork[T], isolation_level: str | None = None) -> T:
        if self.in_transaction():
            log_verbose(self.logger, "[ambient_tx.execute] Joining ambient session")
            return await maybe_await(fn())
        return await self.begin(lambda _tx: fn(), isolation_level=isolation_level)

    async def begin(
        self,
        fn: Callable[[Any], Awaitable[T]],
        *,
        isolation_level: str | None = None,
        timeout: float | None = None,
    ) -> T:
        """Open a top-level transaction whose handle becomes the ambient session for fn.

        Called while a session is active, fn receives that session instead.
        """
        session = self.active_session()
        if session is not None:
            log_verbose(self.logger, "[ambient_tx.begin] Return session from context")
            return await maybe_await(fn(session))

        if self.store.is_active():
            if self.store.get(REQUEST_SCOPE_KEY):
                log_verbose(self.logger, "[ambient_tx.begin] Reusing request context")
            else:
                self.logger.warn("[ambient_tx.begin] Context active without session")
            return await self._run_top_level(fn, isolation_level, timeout)
        return await self.store.run(lambda: self._run_top_level(fn, isolation_level, timeout))

    async def _run_top_level(self, fn, isolation_level, timeout):
        client = self.manager.client
        config = self.manager.config
        if isolation_level is None:
            isolation_level = config.default_isolation_level
        if timeout is None:
            timeout = config.transaction_timeout

        callbacks: list[Callable[[], Any]] = []
        queue_token = self.store.set(SUCCESS_CALLBACKS_KEY, callbacks)
        try:
            result = await client.transaction(
                self._bind(fn), isolation_level=isolation_level, timeout=timeout
            )
            await self._drain(callbacks)
            return result
        finally:
            callbacks.clear()
            self.store.reset(queue_token)

    def _bind(self, fn):
        async def bound(tx):
            existing = self.active_session()
            if existing is not None:
                log_verbose(self.logger, "[ambient_tx.begin] Return session from context")
                return await maybe_await(fn(existing))

            slot = SessionSlot(tx)
            token = self.store.set(ACTIVE_SESSION_KEY, slot)
            log_verbose(self.logger, "[ambient_tx.begin] Top-level: store session and propagate")
            try:
                return await maybe_await(fn(tx))
            finally:
                slot.session = None
                self.store.reset(token)
                log_verbose(self.logger, "[ambient_tx.begin] Top-level: context reset")

        return bound

    async def _drain(self, callbacks: list[Callable[[], Any]]) -> None:
        for callback in callbacks:
            try:
                await maybe_await(callback())
            except Exception as e:
                self.logger.error("[ambient_tx.on_success] Error executing success callback", e)

    def on_success(self, callback: Callable[[], T]) -> T | None:
        """Defer callback until the ambient transaction commits, or run it now if there is none."""
        if self.in_transaction():
            self.store.get(SUCCESS_CALLBACKS_KEY).append(callback)
            return None
        return callback()

    async def execute_isolated(self, fn: UnitOfWork[T]) -> T:
        log_verbose(self.logger, "[ambient_tx.execute_isolated] Detaching ambient session")
        return await self.store.detached(fn)


executor = TransactionalExecutor(manager, context_store)


def transactional(fn=None, *, isolation_level: str | None = None, executor: TransactionalExecutor | None = None):
    """
    Wraps async service methods in an ambient transaction.

        @transactional
        @transactional()
        @transactional("SERIALIZABLE")
        @transactional(isolation_level="SERIALIZABLE", executor=my_executor)

    Nested calls join the outermost transaction.
    """
    if isinstance(fn, str):
        isolation_level, fn = fn, None

    def decorator(method):
        @wraps(method)
        async def wrapper(*args, **kwargs):
            ex = executor or _default_executor()
            return await ex.execute(lambda: method(*args, **kwargs), isolation_level)
        return wrapper

    if fn is not None:
        return decorator(fn)
    return decorator


def _default_executor() -> TransactionalExecutor:
    return executor


async def execute(fn: UnitOfWork[T], isolation_level: str | None = None) -> T:
    return await executor.execute(fn, isolation_level)


def on_success(callback: Callable[[], T]) -> T | None:
    return executor.on_success(callback)


async def execute_isolated(fn: UnitOfWork[T]) -> T:
    return await executor.execute_isolated(fn)


def get_root() -> Any:
    return executor.root


def in_transaction() -> bool:
    return executor.in_transaction()
