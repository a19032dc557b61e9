"""005: create investment_types, investments and sip_transactions tables

Revision ID: 005
Revises: 004
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE investment_types (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            name            VARCHAR(50)     NOT NULL UNIQUE,
            description     VARCHAR(255),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("""
        INSERT INTO investment_types (name, description) VALUES
            ('stocks',       'Individual company shares'),
            ('mutual_funds', 'Pooled funds managed by professionals'),
            ('bonds',        'Government and corporate fixed income'),
            ('etfs',         'Exchange-traded funds'),
            ('real_estate',  'Property and REITs'),
            ('crypto',       'Cryptocurrencies'),
            ('other',        'Any other investment');
    """)

    op.execute("""
        CREATE TABLE investments (
            id                          UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id                     UUID            NOT NULL,
            account_id                  UUID            REFERENCES accounts(id),
            investment_type_id          UUID            NOT NULL REFERENCES investment_types(id),
            name                        VARCHAR(200)    NOT NULL,
            amount                      NUMERIC(14,2),
            units                       NUMERIC(18,6),
            purchase_price              NUMERIC(14,4),
            purchase_date               DATE            NOT NULL,
            description                 VARCHAR(500),
            status                      VARCHAR(20)     NOT NULL DEFAULT 'active',
            withdrawal_amount           NUMERIC(14,2)   NOT NULL DEFAULT 0,
            is_existing                 BOOLEAN         NOT NULL DEFAULT FALSE,
            is_sip                      BOOLEAN         NOT NULL DEFAULT FALSE,
            sip_amount                  NUMERIC(14,2),
            sip_frequency               VARCHAR(10),
            sip_start_date              DATE,
            sip_end_date                DATE,
            sip_day_of_month            INTEGER,
            sip_installments_completed  INTEGER         NOT NULL DEFAULT 0,
            sip_total_installments      INTEGER,
            created_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            deleted_at                  TIMESTAMPTZ,
            CONSTRAINT ck_investments_status CHECK (status IN ('active', 'sold', 'withdrawn')),
            CONSTRAINT ck_investments_sip_frequency CHECK (
                sip_frequency IS NULL
                OR sip_frequency IN ('daily', 'weekly', 'monthly', 'yearly')
            ),
            CONSTRAINT ck_investments_sip_day CHECK (
                sip_day_of_month IS NULL OR sip_day_of_month BETWEEN 1 AND 28
            ),
            CONSTRAINT ck_investments_withdrawal_gte_0 CHECK (withdrawal_amount >= 0)
        );
    """)
    op.execute("""
        CREATE INDEX idx_investments_user_date
        ON investments (user_id, purchase_date DESC)
        WHERE deleted_at IS NULL;
    """)
    op.execute("""
        CREATE TRIGGER trg_investments_updated_at
            BEFORE UPDATE ON investments
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)

    op.execute("""
        CREATE TABLE sip_transactions (
            id                  UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            investment_id       UUID            NOT NULL
                                                REFERENCES investments(id) ON DELETE CASCADE,
            account_id          UUID            REFERENCES accounts(id),
            amount              NUMERIC(14,2)   NOT NULL,
            transaction_date    DATE            NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'pending',
            processed_at        TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_sip_transactions_status CHECK (
                status IN ('pending', 'completed', 'failed')
            ),
            CONSTRAINT uq_sip_transactions_investment_date
                UNIQUE (investment_id, transaction_date)
        );
    """)
    op.execute(
        "COMMENT ON TABLE sip_transactions IS "
        "'One row per applied installment; at most one per investment per date';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS sip_transactions CASCADE;")
    op.execute("DROP TABLE IF EXISTS investments CASCADE;")
    op.execute("DROP TABLE IF EXISTS investment_types CASCADE;")
