"""AccountRepository — concrete implementation of AccountRepositoryProtocol.

Balance mutations use atomic UPDATE ... RETURNING. Decrements carry no
non-negative guard: overdrafts and debt are legal states.
A result of 0 rows means the account (or its details row) does not exist.

Transaction ownership: the CALLER (UnitOfWork.atomic) commits or rolls back.
"""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.domain.models import Account, AccountDetails, BalanceMutation
from src.pf_common.enums import AccountType, BalanceField
from src.pf_common.errors import AccountNotFoundError, InternalError
from src.pf_common.money import ZERO

# ---------------------------------------------------------------------------
# SQL: accounts
# ---------------------------------------------------------------------------

_ACCOUNT_COLUMNS = """
    id, user_id, name, type, currency, balance,
    institution_name, is_active, created_at, updated_at
"""

_INSERT_ACCOUNT_SQL = text(f"""
    INSERT INTO accounts
        (user_id, name, type, currency, balance, institution_name, is_active)
    VALUES
        (:user_id, :name, :type, :currency, :balance, :institution_name, :is_active)
    RETURNING {_ACCOUNT_COLUMNS}
""")

_INSERT_DETAILS_SQL = text("""
    INSERT INTO account_details
        (account_id, credit_limit, available_credit,
         loan_amount, loan_balance, interest_rate, loan_term_months,
         loan_start_date, loan_due_date, current_monthly_payment)
    VALUES
        (:account_id, :credit_limit, :available_credit,
         :loan_amount, :loan_balance, :interest_rate, :loan_term_months,
         :loan_start_date, :loan_due_date, :current_monthly_payment)
""")

_GET_ACCOUNT_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE id = :account_id AND user_id = :user_id
""")

_GET_ACCOUNT_FOR_UPDATE_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE id = :account_id AND user_id = :user_id
    FOR UPDATE
""")

_GET_DETAILS_SQL = text("""
    SELECT account_id, credit_limit, available_credit,
           loan_amount, loan_balance, interest_rate, loan_term_months,
           loan_start_date, loan_due_date, current_monthly_payment
    FROM account_details
    WHERE account_id = :account_id
""")

_UPDATE_ACCOUNT_SQL = text(f"""
    UPDATE accounts
    SET name = :name, currency = :currency, institution_name = :institution_name,
        is_active = :is_active
    WHERE id = :account_id
    RETURNING {_ACCOUNT_COLUMNS}
""")

_LIST_ACCOUNTS_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE user_id = :user_id
      AND (CAST(:type AS TEXT) IS NULL OR type = CAST(:type AS TEXT))
      AND (CAST(:is_active AS BOOLEAN) IS NULL OR is_active = CAST(:is_active AS BOOLEAN))
    ORDER BY created_at DESC
""")

_BALANCE_SUMMARY_SQL = text("""
    SELECT type, COALESCE(SUM(balance), 0) AS total
    FROM accounts
    WHERE user_id = :user_id AND is_active = TRUE
    GROUP BY type
""")

# ---------------------------------------------------------------------------
# SQL: balance mutations
# ---------------------------------------------------------------------------

_INCREMENT_BALANCE_SQL = text("""
    UPDATE accounts
    SET balance = balance + :amount
    WHERE id = :account_id
    RETURNING balance
""")

_DECREMENT_BALANCE_SQL = text("""
    UPDATE accounts
    SET balance = balance - :amount
    WHERE id = :account_id
    RETURNING balance
""")

_INCREMENT_CREDIT_SQL = text("""
    UPDATE account_details
    SET available_credit = COALESCE(available_credit, 0) + :amount
    WHERE account_id = :account_id
    RETURNING available_credit
""")

_DECREMENT_CREDIT_SQL = text("""
    UPDATE account_details
    SET available_credit = COALESCE(available_credit, 0) - :amount
    WHERE account_id = :account_id
    RETURNING available_credit
""")


def _row_to_account(row: object) -> Account:
    return Account(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        type=row.type,  # type: ignore[attr-defined]
        currency=row.currency,  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
        institution_name=row.institution_name,  # type: ignore[attr-defined]
        is_active=row.is_active,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_details(row: object) -> AccountDetails:
    return AccountDetails(
        account_id=str(row.account_id),  # type: ignore[attr-defined]
        credit_limit=row.credit_limit,  # type: ignore[attr-defined]
        available_credit=row.available_credit,  # type: ignore[attr-defined]
        loan_amount=row.loan_amount,  # type: ignore[attr-defined]
        loan_balance=row.loan_balance,  # type: ignore[attr-defined]
        interest_rate=row.interest_rate,  # type: ignore[attr-defined]
        loan_term_months=row.loan_term_months,  # type: ignore[attr-defined]
        loan_start_date=row.loan_start_date,  # type: ignore[attr-defined]
        loan_due_date=row.loan_due_date,  # type: ignore[attr-defined]
        current_monthly_payment=row.current_monthly_payment,  # type: ignore[attr-defined]
    )


class AccountRepository:
    """Concrete repository — all mutations atomic at the SQL level."""

    async def create_account(
        self, db: AsyncSession, account: Account, details: AccountDetails | None
    ) -> Account:
        result = await db.execute(
            _INSERT_ACCOUNT_SQL,
            {
                "user_id": account.user_id,
                "name": account.name,
                "type": account.type,
                "currency": account.currency,
                "balance": account.balance,
                "institution_name": account.institution_name,
                "is_active": account.is_active,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Account insert returned no rows — this should never happen")
        created = _row_to_account(row)
        if details is not None:
            await db.execute(
                _INSERT_DETAILS_SQL,
                {
                    "account_id": created.id,
                    "credit_limit": details.credit_limit,
                    "available_credit": details.available_credit,
                    "loan_amount": details.loan_amount,
                    "loan_balance": details.loan_balance,
                    "interest_rate": details.interest_rate,
                    "loan_term_months": details.loan_term_months,
                    "loan_start_date": details.loan_start_date,
                    "loan_due_date": details.loan_due_date,
                    "current_monthly_payment": details.current_monthly_payment,
                },
            )
        return created

    async def get_account(
        self, db: AsyncSession, account_id: str, user_id: str, for_update: bool = False
    ) -> Account | None:
        sql = _GET_ACCOUNT_FOR_UPDATE_SQL if for_update else _GET_ACCOUNT_SQL
        result = await db.execute(sql, {"account_id": account_id, "user_id": user_id})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def get_details(
        self, db: AsyncSession, account_id: str
    ) -> AccountDetails | None:
        result = await db.execute(_GET_DETAILS_SQL, {"account_id": account_id})
        row = result.fetchone()
        return _row_to_details(row) if row else None

    async def update_account(self, db: AsyncSession, account: Account) -> Account:
        """Write the descriptive columns. balance is not part of this statement."""
        result = await db.execute(
            _UPDATE_ACCOUNT_SQL,
            {
                "account_id": account.id,
                "name": account.name,
                "currency": account.currency,
                "institution_name": account.institution_name,
                "is_active": account.is_active,
            },
        )
        row = result.fetchone()
        if row is None:
            raise AccountNotFoundError(account.id)
        return _row_to_account(row)

    async def list_accounts(
        self,
        db: AsyncSession,
        user_id: str,
        account_type: str | None,
        is_active: bool | None,
    ) -> list[Account]:
        result = await db.execute(
            _LIST_ACCOUNTS_SQL,
            {"user_id": user_id, "type": account_type, "is_active": is_active},
        )
        return [_row_to_account(row) for row in result.fetchall()]

    async def balance_summary(
        self, db: AsyncSession, user_id: str
    ) -> dict[str, Decimal]:
        result = await db.execute(_BALANCE_SUMMARY_SQL, {"user_id": user_id})
        totals = {t.value: ZERO for t in AccountType}
        for row in result.fetchall():
            totals[row.type] = row.total
        return totals

    # -- primitives -------------------------------------------------------

    async def increment(self, db: AsyncSession, account_id: str, amount: Decimal) -> Decimal:
        return await self._execute_mutation(db, _INCREMENT_BALANCE_SQL, account_id, amount)

    async def decrement(self, db: AsyncSession, account_id: str, amount: Decimal) -> Decimal:
        return await self._execute_mutation(db, _DECREMENT_BALANCE_SQL, account_id, amount)

    async def increment_available_credit(
        self, db: AsyncSession, account_id: str, amount: Decimal
    ) -> Decimal:
        return await self._execute_mutation(db, _INCREMENT_CREDIT_SQL, account_id, amount)

    async def decrement_available_credit(
        self, db: AsyncSession, account_id: str, amount: Decimal
    ) -> Decimal:
        return await self._execute_mutation(db, _DECREMENT_CREDIT_SQL, account_id, amount)

    async def apply_mutation(
        self, db: AsyncSession, mutation: BalanceMutation
    ) -> Decimal:
        """Route a BalanceMutation to the matching primitive. Returns the new figure."""
        amount = abs(mutation.delta)
        if mutation.field is BalanceField.AVAILABLE_CREDIT:
            if mutation.delta >= 0:
                return await self.increment_available_credit(db, mutation.account_id, amount)
            return await self.decrement_available_credit(db, mutation.account_id, amount)
        if mutation.delta >= 0:
            return await self.increment(db, mutation.account_id, amount)
        return await self.decrement(db, mutation.account_id, amount)

    async def _execute_mutation(
        self, db: AsyncSession, sql: object, account_id: str, amount: Decimal
    ) -> Decimal:
        result = await db.execute(sql, {"account_id": account_id, "amount": amount})  # type: ignore[arg-type]
        row = result.fetchone()
        if row is None:
            raise InternalError(f"Balance target missing for account {account_id}")
        return row[0]
