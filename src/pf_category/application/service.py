"""CategoryService — visibility checks, withdrawal category resolution, seeding.

Category CRUD is handled elsewhere; this module only answers the questions the
money-moving engines ask.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_category.domain.defaults import (
    DEFAULT_CATEGORIES,
    WITHDRAWAL_CATEGORY_DESCRIPTION,
    WITHDRAWAL_CATEGORY_NAME,
)
from src.pf_category.domain.models import Category
from src.pf_category.domain.repository import CategoryRepositoryProtocol
from src.pf_category.infrastructure.persistence import CategoryRepository
from src.pf_common.enums import CategoryType
from src.pf_common.errors import CategoryNotFoundError

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, repo: CategoryRepositoryProtocol | None = None) -> None:
        self._repo: CategoryRepositoryProtocol = repo or CategoryRepository()

    async def require_visible(
        self, db: AsyncSession, user_id: str, category_id: str
    ) -> Category:
        category = await self._repo.get_visible(db, category_id, user_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        return category

    async def resolve_withdrawal_category(
        self, db: AsyncSession, user_id: str
    ) -> Category:
        """Pick the income category for a withdrawal.

        Fallback chain, all scoped to the user's own categories:
          1. the category named "Investment"
          2. any income category
          3. a newly created "Investment" income category
        Must be called inside the caller's unit so the create rolls back with it.
        """
        category = await self._repo.find_user_category_by_name(
            db, user_id, WITHDRAWAL_CATEGORY_NAME
        )
        if category is not None:
            return category

        category = await self._repo.find_user_category_by_type(
            db, user_id, CategoryType.INCOME.value
        )
        if category is not None:
            return category

        created = await self._repo.create(
            db,
            Category(
                id="",
                user_id=user_id,
                name=WITHDRAWAL_CATEGORY_NAME,
                type=CategoryType.INCOME.value,
                description=WITHDRAWAL_CATEGORY_DESCRIPTION,
            ),
        )
        logger.info("Created withdrawal category %s for user=%s", created.id, user_id)
        return created

    async def seed_defaults(self, db: AsyncSession) -> int:
        """Insert missing shared defaults and commit. Safe to run on every startup."""
        added = 0
        for name, category_type, description in DEFAULT_CATEGORIES:
            if await self._repo.seed_default(db, name, category_type.value, description):
                added += 1
        await db.commit()
        logger.info("Default categories seeded: %d added", added)
        return added
