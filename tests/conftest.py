"""Shared test fixtures."""

import os

# Settings are read at import time and JWT_SECRET has no default.
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.main import app  # noqa: E402
from tests.fakes import (  # noqa: E402
    FakeAccountRepository,
    FakeCategoryRepository,
    FakeInvestmentRepository,
    FakeLedgerRepository,
    FakeSession,
    FakeTransactionRepository,
)


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def accounts() -> FakeAccountRepository:
    return FakeAccountRepository()


@pytest.fixture
def ledger() -> FakeLedgerRepository:
    return FakeLedgerRepository()


@pytest.fixture
def categories() -> FakeCategoryRepository:
    return FakeCategoryRepository()


@pytest.fixture
def transactions() -> FakeTransactionRepository:
    return FakeTransactionRepository()


@pytest.fixture
def investments() -> FakeInvestmentRepository:
    return FakeInvestmentRepository()


@pytest.fixture
def db(
    accounts: FakeAccountRepository,
    ledger: FakeLedgerRepository,
    categories: FakeCategoryRepository,
    transactions: FakeTransactionRepository,
    investments: FakeInvestmentRepository,
) -> FakeSession:
    """Session whose rollback restores every fake store to its last commit."""
    return FakeSession(accounts, ledger, categories, transactions, investments)
