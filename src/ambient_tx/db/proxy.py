# ambient_tx/db/proxy.py
"""
Transparent client proxy
──────────────────────────────────────────────
patch_client(raw) returns a TransactionalClient with the same operation
surface as `raw`. Each attribute lookup is resolved at call time:

    • ambient session active → the session handle (TransactionClient)
    • otherwise              → the raw client
    • `root`                 → always the raw client

transaction() joins the ambient session instead of nesting a native one.
"""
from __future__ import annotations

from typing import Any, Mapping

from ambient_tx.config.base_settings import TransactionalConfig
from ambient_tx.db.context import maybe_await
from ambient_tx.db.manager import SessionManager
from ambient_tx.db.tx import TransactionalExecutor, executor as default_executor
from ambient_tx.errors import UnsupportedUsageError
from ambient_tx.logger import log_verbose

TRANSACTION_ATTR = "transaction"


class TransactionalClient:
    def __init__(self, raw: Any, executor: TransactionalExecutor):
        object.__setattr__(self, "_raw", raw)
        object.__setattr__(self, "_executor", executor)

    @property
    def root(self) -> Any:
        log_verbose(self._executor.logger, "[ambient_tx.proxy] Accessing root client")
        return self._raw

    def _target(self) -> Any:
        session = self._executor.active_session()
        return session if session is not None else self._raw

    async def transaction(self, fn_or_batch: Any, **options: Any) -> Any:
        session = self._executor.active_session()
        if session is None:
            if callable(fn_or_batch):
                return await self._executor.begin(fn_or_batch, **options)
            return await self._raw.transaction(fn_or_batch, **options)

        if callable(fn_or_batch):
            log_verbose(
                self._executor.logger,
                "[ambient_tx.proxy] transaction() called inside a session, joining it",
            )
            return await maybe_await(fn_or_batch(session))
        if isinstance(fn_or_batch, (list, tuple)):
            self._executor.logger.warn(
                "[ambient_tx.proxy] Nested transaction() called with a batch; "
                "it cannot be merged into the ambient session"
            )
            raise UnsupportedUsageError(
                "transaction() with a batch of statements is not supported inside an ambient session"
            )
        raise UnsupportedUsageError(
            f"transaction() called with a non-callable argument: {type(fn_or_batch).__name__}"
        )

    def __getattr__(self, name: str) -> Any:
        if name in ("_raw", "_executor"):
            raise AttributeError(name)
        return getattr(self._target(), name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == TRANSACTION_ATTR:
            self._executor.logger.warn("[ambient_tx.proxy] Please don't patch transaction()")
            return
        setattr(self._target(), name, value)

    def __delattr__(self, name: str) -> None:
        if name == TRANSACTION_ATTR:
            self._executor.logger.warn("[ambient_tx.proxy] Please don't patch transaction()")
            return
        delattr(self._target(), name)

    def __repr__(self) -> str:
        return f"<TransactionalClient target={self._target()!r}>"


def patch_client(
    raw: Any,
    config: TransactionalConfig | Mapping[str, Any] | None = None,
    *,
    manager: SessionManager | None = None,
    executor: TransactionalExecutor | None = None,
) -> TransactionalClient:
    """
    Register `raw` as the transactional client and return its ambient-aware proxy.

    Pass an explicit executor (or manager) to keep the setup off the
    module-level defaults, e.g. one executor per database.
    """
    if executor is None:
        executor = default_executor if manager is None else TransactionalExecutor(manager)
    executor.manager.set_client(raw)
    executor.manager.set_config(config)
    return TransactionalClient(raw, executor)


__all__ = ["TransactionalClient", "patch_client"]
