"""002: create accounts and account_details tables

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # user_id comes from the external auth service; no users table here.
    op.execute("""
        CREATE TABLE accounts (
            id                  UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id             UUID            NOT NULL,
            name                VARCHAR(200)    NOT NULL,
            type                VARCHAR(20)     NOT NULL,
            currency            CHAR(3)         NOT NULL DEFAULT 'USD',
            balance             NUMERIC(14,2)   NOT NULL DEFAULT 0,
            institution_name    VARCHAR(100),
            is_active           BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_accounts_type CHECK (
                type IN ('checking', 'savings', 'credit_card', 'cash', 'investment', 'loan')
            )
        );
    """)
    op.execute("CREATE INDEX idx_accounts_user ON accounts (user_id, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_accounts_updated_at
            BEFORE UPDATE ON accounts
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE accounts IS 'Balance is signed: overdraft and debt are legal';")

    op.execute("""
        CREATE TABLE account_details (
            account_id              UUID            PRIMARY KEY
                                                    REFERENCES accounts(id) ON DELETE CASCADE,
            credit_limit            NUMERIC(14,2),
            available_credit        NUMERIC(14,2),
            loan_amount             NUMERIC(14,2),
            loan_balance            NUMERIC(14,2),
            interest_rate           NUMERIC(7,4),
            loan_term_months        INTEGER,
            loan_start_date         DATE,
            loan_due_date           DATE,
            current_monthly_payment NUMERIC(14,2),
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_account_details_updated_at
            BEFORE UPDATE ON account_details
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE account_details IS "
        "'credit_card and loan figures; loan_balance is independent of accounts.balance';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS account_details CASCADE;")
    op.execute("DROP TABLE IF EXISTS accounts CASCADE;")
