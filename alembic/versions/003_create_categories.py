"""003: create categories table

Revision ID: 003
Revises: 002
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE categories (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id         UUID,
            name            VARCHAR(100)    NOT NULL,
            type            VARCHAR(20)     NOT NULL,
            description     VARCHAR(255),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_categories_type CHECK (type IN ('income', 'expense', 'transfer'))
        );
    """)
    # NULL user_id rows (shared defaults) do not collide here; the seed guards them.
    op.execute("CREATE UNIQUE INDEX idx_categories_user_name ON categories (user_id, name);")
    op.execute("""
        CREATE TRIGGER trg_categories_updated_at
            BEFORE UPDATE ON categories
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS categories CASCADE;")
