"""Root conftest — shared test configuration and fixtures.

Invariants:
    - Tests never touch a real PostgreSQL instance (DATABASE_URL forced to SQLite)
    - sql_store uses a file-backed SQLite database per test so concurrent
      connections share one database
    - clock is a FakeClock: tests move time explicitly, never sleep
"""

import os
from datetime import datetime, timedelta, timezone

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")

from vanish.db.base import Base  # noqa: E402
from vanish.infrastructure.database import DatabaseSessionManager  # noqa: E402
from vanish.infrastructure.message_store import SqlMessageRecordStore  # noqa: E402
import vanish.models  # noqa: E402,F401


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
async def db_manager(tmp_path):
    manager = DatabaseSessionManager(
        f"sqlite+aiosqlite:///{tmp_path / 'vanish.db'}",
    )
    async with manager.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield manager
    await manager.dispose()


@pytest.fixture
async def sql_store(db_manager):
    return SqlMessageRecordStore(db_manager, timeout_seconds=5.0)
