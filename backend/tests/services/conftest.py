"""Service test fixtures — SQLite-backed message store + FastAPI test client.

Invariants:
    - Every test gets a fresh file-backed SQLite database (root db_manager fixture)
    - database.db_manager patched so get_db_manager and the readiness probe see it
    - get_clock overridden with the test's FakeClock: routes never read wall time

Design Decisions:
    - SQLite over PostgreSQL: the guarded UPDATE/DELETE statements are portable
      and the rowcount semantics match
    - Dependency override on the clock only: the store goes through the real
      get_message_store → SqlMessageRecordStore path
"""

import pytest
from httpx import ASGITransport, AsyncClient

from vanish.api.dependencies import get_clock
import vanish.infrastructure.database as db_module
from vanish.main import app


@pytest.fixture
async def client(db_manager, clock):
    """FastAPI test client bound to the test database and clock."""
    app.dependency_overrides[get_clock] = lambda: clock

    original_manager = db_module.db_manager
    db_module.db_manager = db_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def owner_headers():
    return {"X-Requester-Id": "owner-1"}
