"""Integration-test fixtures.

Pre-condition: PostgreSQL and Redis running, `alembic upgrade head` applied.
Set RUN_INTEGRATION=1 to run them.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.
"""

import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from src.main import app
from src.pf_category.application.service import CategoryService
from src.pf_common.database import async_session_factory


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if os.environ.get("RUN_INTEGRATION") == "1":
        return
    skip = pytest.mark.skip(reason="needs PostgreSQL + Redis; set RUN_INTEGRATION=1")
    for item in items:
        if "integration" in item.nodeid.split("/"):
            item.add_marker(skip)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def shared_categories(client: AsyncClient) -> dict[str, str]:
    """Shared default categories by name. The lifespan hook does not run under ASGITransport."""
    async with async_session_factory() as session:
        await CategoryService().seed_defaults(session)
        rows = await session.execute(
            text("SELECT id, name FROM categories WHERE user_id IS NULL")
        )
        return {row.name: str(row.id) for row in rows}
