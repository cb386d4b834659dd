# ambient_tx/db/middleware.py
from __future__ import annotations

from fastapi import FastAPI
from starlette.types import ASGIApp, Receive, Scope, Send

from ambient_tx.db.context import REQUEST_SCOPE_KEY, ExecutionContextStore, context_store


class AmbientContextMiddleware:
    """
    Opens one execution context per HTTP/websocket request.

    Transactions started while handling the request reuse that context,
    which is marked with REQUEST_SCOPE_KEY. Lifespan events pass through
    untouched.
    """

    def __init__(self, app: ASGIApp, *, store: ExecutionContextStore = context_store):
        self.app = app
        self.store = store

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            return await self.app(scope, receive, send)
        await self.store.run(lambda: self.app(scope, receive, send), {REQUEST_SCOPE_KEY: True})


def install_context_middleware(app: FastAPI, *, store: ExecutionContextStore = context_store) -> None:
    """Attach AmbientContextMiddleware to app."""
    app.add_middleware(AmbientContextMiddleware, store=store)
    print("✅ [ambient_tx] Ambient context middleware registered")
