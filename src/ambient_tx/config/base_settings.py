# src/ambient_tx/config/base_settings.py
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict


class TransactionalConfig(BaseSettings):
    """
    Process-wide settings for ambient transactions.
    Set once through patch_client() and never mutated afterwards.
    Every field can also come from the environment (AMBIENT_TX_*).
    """

    enable_logging: bool = False
    custom_logger: Any = None
    transaction_timeout: float = 5.0
    default_isolation_level: str | None = None
    database_url: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="AMBIENT_TX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @property
    def DB_URL(self) -> str:
        return self.database_url or ""
