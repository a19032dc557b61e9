"""004: create expenses and incomes tables

Revision ID: 004
Revises: 003
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE expenses (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id         UUID            NOT NULL,
            account_id      UUID            NOT NULL REFERENCES accounts(id),
            category_id     UUID            NOT NULL REFERENCES categories(id),
            amount          NUMERIC(14,2)   NOT NULL,
            expense_date    DATE            NOT NULL,
            description     VARCHAR(500),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            deleted_at      TIMESTAMPTZ,
            CONSTRAINT ck_expenses_amount_gt_0 CHECK (amount > 0)
        );
    """)
    op.execute("""
        CREATE INDEX idx_expenses_user_date
        ON expenses (user_id, expense_date DESC)
        WHERE deleted_at IS NULL;
    """)
    op.execute("CREATE INDEX idx_expenses_account ON expenses (account_id);")
    op.execute("""
        CREATE TRIGGER trg_expenses_updated_at
            BEFORE UPDATE ON expenses
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE TABLE incomes (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id         UUID            NOT NULL,
            account_id      UUID            NOT NULL REFERENCES accounts(id),
            category_id     UUID            NOT NULL REFERENCES categories(id),
            amount          NUMERIC(14,2)   NOT NULL,
            income_date     DATE            NOT NULL,
            description     VARCHAR(500),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            deleted_at      TIMESTAMPTZ,
            CONSTRAINT ck_incomes_amount_gt_0 CHECK (amount > 0)
        );
    """)
    op.execute("""
        CREATE INDEX idx_incomes_user_date
        ON incomes (user_id, income_date DESC)
        WHERE deleted_at IS NULL;
    """)
    op.execute("CREATE INDEX idx_incomes_account ON incomes (account_id);")
    op.execute("""
        CREATE TRIGGER trg_incomes_updated_at
            BEFORE UPDATE ON incomes
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS incomes CASCADE;")
    op.execute("DROP TABLE IF EXISTS expenses CASCADE;")
