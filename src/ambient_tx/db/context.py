# ambient_tx/db/context.py
"""
ContextVar-based execution context store
──────────────────────────────────────────────
• run(body)        → opens a fresh context (empty unless `initial` is given)
                     for body and its descendants
• get()/set()      → read/write the current context (copy-on-write)
• reset(token)     → undo a set() (always in a finally block)
• detached(body)   → run body with no active context at all

Every asyncio task copies the ContextVar when it is created and values are
never mutated in place, so two concurrent top-level calls can interleave
freely without seeing each other's session. State that must be cleared for
every descendant at once (the session handle) is stored behind a mutable
holder instead.
"""
from __future__ import annotations

import inspect
from contextvars import ContextVar, Token
from typing import Any, Awaitable, Callable, Mapping, TypeVar, Union

from ambient_tx.errors import ContextNotActiveError

T = TypeVar("T")

ACTIVE_SESSION_KEY = "active_session"
SUCCESS_CALLBACKS_KEY = "success_callbacks"
REQUEST_SCOPE_KEY = "request_scope"

Body = Callable[[], Union[T, Awaitable[T]]]


async def maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class ExecutionContextStore:
    def __init__(self, name: str = "_ambient_tx_context"):
        self._cv: ContextVar[Mapping[str, Any] | None] = ContextVar(name, default=None)

    def is_active(self) -> bool:
        return self._cv.get() is not None

    def get(self, key: str, default: Any = None) -> Any:
        cell = self._cv.get()
        if cell is None:
            return default
        return cell.get(key, default)

    def set(self, key: str, value: Any) -> Token:
        """Bind `value` under `key` in the current context; returns a reset token."""
        cell = self._cv.get()
        if cell is None:
            raise ContextNotActiveError(
                f"Cannot set '{key}': no active execution context. "
                "Wrap the call in ExecutionContextStore.run()."
            )
        return self._cv.set({**cell, key: value})

    def reset(self, token: Token) -> None:
        self._cv.reset(token)

    async def run(self, body: Body[T], initial: Mapping[str, Any] | None = None) -> T:
        """Run body inside a brand-new context and restore the previous one afterwards."""
        token = self._cv.set(dict(initial or {}))
        try:
            return await maybe_await(body())
        finally:
            self._cv.reset(token)

    async def detached(self, body: Body[T]) -> T:
        token = self._cv.set(None)
        try:
            return await maybe_await(body())
        finally:
            self._cv.reset(token)


context_store = ExecutionContextStore()
