import asyncio

import pytest

from ambient_tx.db.context import ExecutionContextStore
from ambient_tx.db.manager import SessionManager, manager
from ambient_tx.db.proxy import patch_client
from ambient_tx.db.tx import TransactionalExecutor
from ambient_tx.testing.fixtures import database, tx_client  # noqa: F401

import tests.models  # noqa: F401  (registers tables on Base.metadata)


# ──────────────────────────────────────────────────────────────
# In-memory transactional client
# ──────────────────────────────────────────────────────────────
class FakeSession:
    """Session handle: writes stay private until the owning transaction commits."""

    def __init__(self, client, number):
        self.client = client
        self.number = number
        self.writes = []

    async def write(self, value):
        await asyncio.sleep(0)
        self.writes.append(value)
        return value

    async def read(self):
        await asyncio.sleep(0)
        return list(self.client.committed) + list(self.writes)

    def __repr__(self):
        return f"<FakeSession #{self.number}>"


class FakeClient:
    """Raw client: writes autocommit; transaction() commits or rolls back a FakeSession."""

    def __init__(self):
        self.committed = []
        self.calls = []
        self.events = []
        self.sessions = []

    async def write(self, value):
        await asyncio.sleep(0)
        self.committed.append(value)
        return value

    async def read(self):
        await asyncio.sleep(0)
        return list(self.committed)

    async def transaction(self, fn, *, isolation_level=None, timeout=None):
        self.calls.append({"isolation_level": isolation_level, "timeout": timeout})
        if not callable(fn):
            self.events.append("batch")
            return [await self.write(value) for value in fn]

        session = FakeSession(self, len(self.sessions) + 1)
        self.sessions.append(session)
        self.events.append(f"begin:{session.number}")
        try:
            result = await asyncio.wait_for(fn(session), timeout)
        except Exception:
            self.events.append(f"rollback:{session.number}")
            raise
        self.committed.extend(session.writes)
        self.events.append(f"commit:{session.number}")
        return result


class RecordingLogger:
    def __init__(self):
        self.records = []

    def _record(self, level, message, params):
        self.records.append((level, message, params))

    def log(self, message, *params):
        self._record("log", message, params)

    def error(self, message, *params):
        self._record("error", message, params)

    def warn(self, message, *params):
        self._record("warn", message, params)

    def debug(self, message, *params):
        self._record("debug", message, params)

    def verbose(self, message, *params):
        self._record("verbose", message, params)

    def messages(self, level):
        return [message for lvl, message, _ in self.records if lvl == level]


# ──────────────────────────────────────────────────────────────
# Fixtures
# ──────────────────────────────────────────────────────────────
@pytest.fixture()
def fake_client():
    return FakeClient()


@pytest.fixture()
def recording_logger():
    return RecordingLogger()


@pytest.fixture()
def store():
    return ExecutionContextStore("_ambient_tx_test_context")


@pytest.fixture()
def tx_executor(fake_client, recording_logger, store):
    m = SessionManager()
    m.set_client(fake_client)
    m.set_config({"enable_logging": True, "custom_logger": recording_logger})
    return TransactionalExecutor(m, store)


@pytest.fixture()
def fake_proxy(fake_client, recording_logger, tx_executor):
    return patch_client(
        fake_client,
        {"enable_logging": True, "custom_logger": recording_logger},
        executor=tx_executor,
    )


@pytest.fixture()
def default_fake_proxy(fake_client, recording_logger):
    """Fake client patched into the module-level default manager."""
    client = patch_client(fake_client, {"enable_logging": True, "custom_logger": recording_logger})
    yield client
    manager.reset()
