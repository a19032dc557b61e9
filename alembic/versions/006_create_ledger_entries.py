"""006: create ledger_entries table

Revision ID: 006
Revises: 005
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_entries (
            id              BIGSERIAL       PRIMARY KEY,
            account_id      UUID            NOT NULL REFERENCES accounts(id),
            amount          NUMERIC(14,2)   NOT NULL,
            expense_id      UUID            REFERENCES expenses(id),
            income_id       UUID            REFERENCES incomes(id),
            investment_id   UUID            REFERENCES investments(id),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_one_provenance CHECK (
                (expense_id IS NOT NULL)::INT
                + (income_id IS NOT NULL)::INT
                + (investment_id IS NOT NULL)::INT = 1
            )
        );
    """)
    op.execute("CREATE INDEX idx_ledger_account ON ledger_entries (account_id, id DESC);")
    op.execute("CREATE INDEX idx_ledger_expense ON ledger_entries (expense_id) WHERE expense_id IS NOT NULL;")
    op.execute("CREATE INDEX idx_ledger_income ON ledger_entries (income_id) WHERE income_id IS NOT NULL;")
    op.execute(
        "CREATE INDEX idx_ledger_investment ON ledger_entries (investment_id) "
        "WHERE investment_id IS NOT NULL;"
    )
    op.execute(
        "COMMENT ON TABLE ledger_entries IS "
        "'Signed account movements; rows are removed only when their source is edited';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_entries CASCADE;")
