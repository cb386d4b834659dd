# ambient_tx/db/manager.py
"""
Session manager
──────────────────────────────────────────────
Holds the raw transactional client and the effective config/logger.
Both are set once by patch_client() and only read afterwards.
"""
from __future__ import annotations

from typing import Any, Mapping

from ambient_tx.config.base_settings import TransactionalConfig
from ambient_tx.errors import ConfigurationError
from ambient_tx.logger import ConsoleLogger, EmptyLogger


class SessionManager:
    def __init__(self) -> None:
        self._client: Any = None
        self._config: TransactionalConfig | None = None
        self._logger: Any = EmptyLogger()

    def set_client(self, client: Any) -> None:
        self._client = client

    def set_config(self, config: TransactionalConfig | Mapping[str, Any] | None = None) -> None:
        if config is None:
            config = TransactionalConfig()
        elif not isinstance(config, TransactionalConfig):
            config = TransactionalConfig(**dict(config))
        self._config = config

        if config.enable_logging:
            self._logger = config.custom_logger or ConsoleLogger()
        else:
            self._logger = EmptyLogger()

    @property
    def client(self) -> Any:
        if self._client is None:
            raise ConfigurationError(
                "SessionManager: client not set. Did you call patch_client()?"
            )
        return self._client

    @property
    def config(self) -> TransactionalConfig:
        if self._config is None:
            self._config = TransactionalConfig()
        return self._config

    @property
    def logger(self) -> Any:
        return self._logger

    def is_configured(self) -> bool:
        return self._client is not None

    def reset(self) -> None:
        """Forget client and config (tests only)."""
        self._client = None
        self._config = None
        self._logger = EmptyLogger()


manager = SessionManager()
