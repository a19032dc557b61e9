"""Unit tests for CategoryService."""

from unittest.mock import MagicMock

import pytest

from src.pf_category.application.service import CategoryService
from src.pf_category.domain.defaults import DEFAULT_CATEGORIES
from src.pf_common.errors import CategoryNotFoundError
from tests.fakes import OTHER_USER_ID, USER_ID, FakeCategoryRepository, FakeSession


class TestRequireVisible:
    async def test_own_category(self, categories: FakeCategoryRepository) -> None:
        cat = categories.add("Food", "expense")
        found = await CategoryService(categories).require_visible(MagicMock(), USER_ID, cat.id)
        assert found.name == "Food"

    async def test_shared_category(self, categories: FakeCategoryRepository) -> None:
        cat = categories.add("Bill", "expense", user_id=None)
        found = await CategoryService(categories).require_visible(MagicMock(), USER_ID, cat.id)
        assert found.is_shared

    async def test_other_users_category(self, categories: FakeCategoryRepository) -> None:
        cat = categories.add("Secret", "expense", user_id=OTHER_USER_ID)
        with pytest.raises(CategoryNotFoundError):
            await CategoryService(categories).require_visible(MagicMock(), USER_ID, cat.id)


class TestResolveWithdrawalCategory:
    async def test_prefers_investment_by_name(self, categories: FakeCategoryRepository) -> None:
        categories.add("Salary", "income")
        inv = categories.add("Investment", "income")
        found = await CategoryService(categories).resolve_withdrawal_category(MagicMock(), USER_ID)
        assert found.id == inv.id

    async def test_falls_back_to_any_income(self, categories: FakeCategoryRepository) -> None:
        categories.add("Food", "expense")
        salary = categories.add("Salary", "income")
        found = await CategoryService(categories).resolve_withdrawal_category(MagicMock(), USER_ID)
        assert found.id == salary.id

    async def test_creates_when_user_has_none(self, categories: FakeCategoryRepository) -> None:
        # Shared and foreign categories are not candidates.
        categories.add("Investment", "income", user_id=None)
        categories.add("Investment", "income", user_id=OTHER_USER_ID)

        found = await CategoryService(categories).resolve_withdrawal_category(MagicMock(), USER_ID)

        assert found.user_id == USER_ID
        assert found.name == "Investment"
        assert found.type == "income"
        assert found.description == "Investment income"
        assert len(categories.categories) == 3


class TestSeedDefaults:
    async def test_seed_is_idempotent(self, categories: FakeCategoryRepository, db: FakeSession) -> None:
        svc = CategoryService(categories)
        assert await svc.seed_defaults(db) == len(DEFAULT_CATEGORIES)
        assert await svc.seed_defaults(db) == 0
        assert all(c.is_shared for c in categories.categories.values())
        assert db.commits == 2
