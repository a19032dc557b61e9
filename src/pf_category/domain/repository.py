"""Repository Protocol for category lookups."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_category.domain.models import Category


class CategoryRepositoryProtocol(Protocol):
    async def get_visible(
        self, db: AsyncSession, category_id: str, user_id: str
    ) -> Category | None: ...

    async def find_user_category_by_name(
        self, db: AsyncSession, user_id: str, name: str
    ) -> Category | None: ...

    async def find_user_category_by_type(
        self, db: AsyncSession, user_id: str, category_type: str
    ) -> Category | None: ...

    async def create(self, db: AsyncSession, category: Category) -> Category: ...

    async def seed_default(
        self, db: AsyncSession, name: str, category_type: str, description: str
    ) -> bool: ...
