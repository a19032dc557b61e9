"""CategoryRepository — SQL for the categories table.

Never commits; callers run inside a UnitOfWork or the startup seed transaction.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_category.domain.models import Category
from src.pf_common.errors import InternalError

_CATEGORY_COLUMNS = "id, user_id, name, type, description, created_at"

# Owned by the user, or a shared default.
_GET_VISIBLE_SQL = text(f"""
    SELECT {_CATEGORY_COLUMNS}
    FROM categories
    WHERE id = :category_id
      AND (user_id = :user_id OR user_id IS NULL)
""")

_FIND_USER_BY_NAME_SQL = text(f"""
    SELECT {_CATEGORY_COLUMNS}
    FROM categories
    WHERE user_id = :user_id AND name = :name
    LIMIT 1
""")

_FIND_USER_BY_TYPE_SQL = text(f"""
    SELECT {_CATEGORY_COLUMNS}
    FROM categories
    WHERE user_id = :user_id AND type = :type
    ORDER BY created_at
    LIMIT 1
""")

_INSERT_CATEGORY_SQL = text(f"""
    INSERT INTO categories (user_id, name, type, description)
    VALUES (:user_id, :name, :type, :description)
    RETURNING {_CATEGORY_COLUMNS}
""")

# NULL user_id rows never collide on the (user_id, name) unique index,
# so idempotency is enforced by the NOT EXISTS guard.
_SEED_DEFAULT_SQL = text("""
    INSERT INTO categories (user_id, name, type, description)
    SELECT NULL, :name, :type, :description
    WHERE NOT EXISTS (
        SELECT 1 FROM categories WHERE user_id IS NULL AND name = :name
    )
""")


def _row_to_category(row: object) -> Category:
    user_id = row.user_id  # type: ignore[attr-defined]
    return Category(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=str(user_id) if user_id is not None else None,
        name=row.name,  # type: ignore[attr-defined]
        type=row.type,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class CategoryRepository:
    async def get_visible(
        self, db: AsyncSession, category_id: str, user_id: str
    ) -> Category | None:
        result = await db.execute(
            _GET_VISIBLE_SQL, {"category_id": category_id, "user_id": user_id}
        )
        row = result.fetchone()
        return _row_to_category(row) if row else None

    async def find_user_category_by_name(
        self, db: AsyncSession, user_id: str, name: str
    ) -> Category | None:
        result = await db.execute(
            _FIND_USER_BY_NAME_SQL, {"user_id": user_id, "name": name}
        )
        row = result.fetchone()
        return _row_to_category(row) if row else None

    async def find_user_category_by_type(
        self, db: AsyncSession, user_id: str, category_type: str
    ) -> Category | None:
        result = await db.execute(
            _FIND_USER_BY_TYPE_SQL, {"user_id": user_id, "type": category_type}
        )
        row = result.fetchone()
        return _row_to_category(row) if row else None

    async def create(self, db: AsyncSession, category: Category) -> Category:
        result = await db.execute(
            _INSERT_CATEGORY_SQL,
            {
                "user_id": category.user_id,
                "name": category.name,
                "type": category.type,
                "description": category.description,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Category insert returned no rows — this should never happen")
        return _row_to_category(row)

    async def seed_default(
        self, db: AsyncSession, name: str, category_type: str, description: str
    ) -> bool:
        """Insert a shared default if absent. Returns True when a row was added."""
        result = await db.execute(
            _SEED_DEFAULT_SQL,
            {"name": name, "type": category_type, "description": description},
        )
        return bool(result.rowcount)  # type: ignore[attr-defined]
