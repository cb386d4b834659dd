"""
──────────────────────────────────────────────────────────────────────────────
ambient_tx.testing.fixtures
──────────────────────────────────────────────────────────────────────────────
Purpose:
    Provide reusable pytest fixtures for applications built on ambient_tx.

Exports:
    - database  → file-backed sqlite Database with all Base tables created
    - tx_client → default manager patched with `database`; yields the proxy

Usage in your conftest.py:
    from ambient_tx.testing.fixtures import database, tx_client  # noqa: F401

    async def test_repo_create(tx_client):
        post = await PostRepo(tx_client).create(title="Alice")
        assert post.id
──────────────────────────────────────────────────────────────────────────────
"""

import pytest

from ambient_tx.db.base import Base
from ambient_tx.db.client import Database
from ambient_tx.db.manager import manager
from ambient_tx.db.proxy import patch_client


# ──────────────────────────────────────────────────────────────
# Database Fixture (per test)
# ──────────────────────────────────────────────────────────────
@pytest.fixture()
async def database(tmp_path):
    """
    Fresh sqlite database per test. A file (not :memory:) so that
    concurrent transactions get their own connections.
    """
    db = Database.from_url(f"sqlite+aiosqlite:///{tmp_path / 'ambient_tx.db'}")
    await db.create_all(Base.metadata)
    yield db
    await db.dispose()


# ──────────────────────────────────────────────────────────────
# Patched client Fixture (per test)
# ──────────────────────────────────────────────────────────────
@pytest.fixture()
async def tx_client(database):
    client = patch_client(database)
    yield client
    manager.reset()
