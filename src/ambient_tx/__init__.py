# ambient_tx/__init__.py
"""
ambient_tx
──────────────────────────────────────────────────────────────
Ambient transactions for SQLAlchemy asyncio.
Provides:
    - ContextVar-based execution context store
    - Transparent client proxy (patch_client)
    - @transactional with join semantics + on_success callbacks
    - Isolated execution against the raw client
    - Repository / service base classes
    - Optional FastAPI request-context middleware
──────────────────────────────────────────────────────────────
"""

__version__ = "0.1.0"

from ambient_tx.config.base_settings import TransactionalConfig
from ambient_tx.db.client import Database, TransactionClient
from ambient_tx.db.context import ExecutionContextStore, context_store
from ambient_tx.db.manager import SessionManager, manager
from ambient_tx.db.proxy import TransactionalClient, patch_client
from ambient_tx.db.tx import (
    TransactionalExecutor,
    execute,
    execute_isolated,
    executor,
    get_root,
    in_transaction,
    on_success,
    transactional,
)
from ambient_tx.errors import (
    ConfigurationError,
    ContextNotActiveError,
    TransactionalError,
    UnsupportedUsageError,
)
from ambient_tx.logger import ConsoleLogger, EmptyLogger, LoggerProtocol

__all__ = [
    "TransactionalConfig",
    "Database",
    "TransactionClient",
    "ExecutionContextStore",
    "context_store",
    "SessionManager",
    "manager",
    "TransactionalClient",
    "patch_client",
    "TransactionalExecutor",
    "executor",
    "execute",
    "execute_isolated",
    "get_root",
    "in_transaction",
    "on_success",
    "transactional",
    "TransactionalError",
    "ConfigurationError",
    "ContextNotActiveError",
    "UnsupportedUsageError",
    "ConsoleLogger",
    "EmptyLogger",
    "LoggerProtocol",
]
