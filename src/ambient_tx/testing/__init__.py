"""
Testing utilities for ambient_tx apps.
──────────────────────────────────────────────────────────────
Provides pytest fixtures for a throwaway sqlite database and a patched client.
──────────────────────────────────────────────────────────────
"""
from .fixtures import database, tx_client

__all__ = ["database", "tx_client"]
