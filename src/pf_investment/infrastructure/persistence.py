"""InvestmentRepository — SQL for investments, investment_types, sip_transactions.

Reads exclude soft-deleted investments. Called within the caller's unit;
never commits.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_common.errors import InternalError, InvestmentNotFoundError
from src.pf_investment.domain.models import (
    Investment,
    InvestmentFilter,
    InvestmentType,
    SipTransaction,
)

# ---------------------------------------------------------------------------
# SQL: investment_types
# ---------------------------------------------------------------------------

_GET_TYPE_SQL = text("""
    SELECT id, name, description FROM investment_types WHERE id = :type_id
""")

_LIST_TYPES_SQL = text("""
    SELECT id, name, description FROM investment_types ORDER BY name
""")

# ---------------------------------------------------------------------------
# SQL: investments
# ---------------------------------------------------------------------------

_COLUMNS = """
    i.id, i.user_id, i.account_id, i.investment_type_id, i.name, i.amount,
    i.units, i.purchase_price, i.purchase_date, i.description, i.status,
    i.withdrawal_amount, i.is_existing, i.is_sip, i.sip_amount, i.sip_frequency,
    i.sip_start_date, i.sip_end_date, i.sip_day_of_month,
    i.sip_installments_completed, i.sip_total_installments,
    i.created_at, i.updated_at, i.deleted_at
"""

# Bare column list for RETURNING clauses, which cannot use the table alias.
_RETURNING = _COLUMNS.replace("i.", "") + ", NULL AS investment_type_name"

_INSERT_SQL = text(f"""
    INSERT INTO investments
        (user_id, account_id, investment_type_id, name, amount, units,
         purchase_price, purchase_date, description, is_existing,
         is_sip, sip_amount, sip_frequency, sip_start_date, sip_end_date,
         sip_day_of_month, sip_total_installments)
    VALUES
        (:user_id, :account_id, :investment_type_id, :name, :amount, :units,
         :purchase_price, :purchase_date, :description, :is_existing,
         :is_sip, :sip_amount, :sip_frequency, :sip_start_date, :sip_end_date,
         :sip_day_of_month, :sip_total_installments)
    RETURNING {_RETURNING}
""")

_GET_SQL = text(f"""
    SELECT {_COLUMNS}, t.name AS investment_type_name
    FROM investments i
    LEFT JOIN investment_types t ON t.id = i.investment_type_id
    WHERE i.id = :id AND i.user_id = :user_id AND i.deleted_at IS NULL
""")

# FOR UPDATE cannot lock the nullable side of an outer join, so no join here.
_GET_FOR_UPDATE_SQL = text(f"""
    SELECT {_COLUMNS}, NULL AS investment_type_name
    FROM investments i
    WHERE i.id = :id AND i.user_id = :user_id AND i.deleted_at IS NULL
    FOR UPDATE
""")

# is_sip, is_existing and account_id are fixed at creation.
_UPDATE_SQL = text(f"""
    UPDATE investments
    SET name = :name,
        amount = :amount,
        units = :units,
        purchase_price = :purchase_price,
        purchase_date = :purchase_date,
        description = :description,
        investment_type_id = :investment_type_id,
        sip_amount = :sip_amount,
        sip_frequency = :sip_frequency,
        sip_start_date = :sip_start_date,
        sip_end_date = :sip_end_date,
        sip_day_of_month = :sip_day_of_month,
        sip_total_installments = :sip_total_installments,
        updated_at = NOW()
    WHERE id = :id AND deleted_at IS NULL
    RETURNING {_RETURNING}
""")

_SOFT_DELETE_SQL = text("""
    UPDATE investments
    SET deleted_at = NOW()
    WHERE id = :id AND deleted_at IS NULL
    RETURNING id
""")

_RECORD_WITHDRAWAL_SQL = text(f"""
    UPDATE investments
    SET withdrawal_amount = :withdrawal_amount,
        status = :status,
        updated_at = NOW()
    WHERE id = :id AND deleted_at IS NULL
    RETURNING {_RETURNING}
""")

_INCREMENT_INSTALLMENTS_SQL = text("""
    UPDATE investments
    SET sip_installments_completed = sip_installments_completed + 1,
        updated_at = NOW()
    WHERE id = :id
    RETURNING sip_installments_completed
""")

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}, t.name AS investment_type_name
    FROM investments i
    LEFT JOIN investment_types t ON t.id = i.investment_type_id
    WHERE i.user_id = :user_id
      AND i.deleted_at IS NULL
      AND (CAST(:start_date AS DATE) IS NULL OR i.purchase_date >= CAST(:start_date AS DATE))
      AND (CAST(:end_date AS DATE) IS NULL OR i.purchase_date <= CAST(:end_date AS DATE))
      AND (CAST(:type_id AS UUID) IS NULL OR i.investment_type_id = CAST(:type_id AS UUID))
      AND (CAST(:account_id AS UUID) IS NULL OR i.account_id = CAST(:account_id AS UUID))
      AND (CAST(:status AS TEXT) IS NULL OR i.status = CAST(:status AS TEXT))
      AND (CAST(:is_sip AS BOOLEAN) IS NULL OR i.is_sip = CAST(:is_sip AS BOOLEAN))
    ORDER BY i.purchase_date DESC, i.created_at DESC
    LIMIT :limit OFFSET :offset
""")

# ---------------------------------------------------------------------------
# SQL: sip_transactions
# ---------------------------------------------------------------------------

_SIP_COLUMNS = """
    id, investment_id, account_id, amount, transaction_date,
    status, processed_at, created_at
"""

_SIP_EXISTS_SQL = text("""
    SELECT 1 FROM sip_transactions
    WHERE investment_id = :investment_id AND transaction_date = :transaction_date
""")

_INSERT_SIP_SQL = text(f"""
    INSERT INTO sip_transactions
        (investment_id, account_id, amount, transaction_date, status, processed_at)
    VALUES
        (:investment_id, :account_id, :amount, :transaction_date, :status, :processed_at)
    RETURNING {_SIP_COLUMNS}
""")

_LIST_SIP_SQL = text(f"""
    SELECT {_SIP_COLUMNS}
    FROM sip_transactions
    WHERE investment_id = :investment_id
    ORDER BY transaction_date DESC
""")


def _opt_str(value: object) -> str | None:
    return str(value) if value is not None else None


def _row_to_type(row: object) -> InvestmentType:
    return InvestmentType(
        id=str(row.id),  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
    )


def _row_to_investment(row: object) -> Investment:
    return Investment(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        account_id=_opt_str(row.account_id),  # type: ignore[attr-defined]
        investment_type_id=str(row.investment_type_id),  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        purchase_date=row.purchase_date,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        withdrawal_amount=row.withdrawal_amount,  # type: ignore[attr-defined]
        is_existing=row.is_existing,  # type: ignore[attr-defined]
        units=row.units,  # type: ignore[attr-defined]
        purchase_price=row.purchase_price,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        is_sip=row.is_sip,  # type: ignore[attr-defined]
        sip_amount=row.sip_amount,  # type: ignore[attr-defined]
        sip_frequency=row.sip_frequency,  # type: ignore[attr-defined]
        sip_start_date=row.sip_start_date,  # type: ignore[attr-defined]
        sip_end_date=row.sip_end_date,  # type: ignore[attr-defined]
        sip_day_of_month=row.sip_day_of_month,  # type: ignore[attr-defined]
        sip_installments_completed=row.sip_installments_completed,  # type: ignore[attr-defined]
        sip_total_installments=row.sip_total_installments,  # type: ignore[attr-defined]
        investment_type_name=row.investment_type_name,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
        deleted_at=row.deleted_at,  # type: ignore[attr-defined]
    )


def _row_to_sip(row: object) -> SipTransaction:
    return SipTransaction(
        id=str(row.id),  # type: ignore[attr-defined]
        investment_id=str(row.investment_id),  # type: ignore[attr-defined]
        account_id=_opt_str(row.account_id),  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        transaction_date=row.transaction_date,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        processed_at=row.processed_at,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _write_params(inv: Investment) -> dict[str, object]:
    return {
        "name": inv.name,
        "amount": inv.amount,
        "units": inv.units,
        "purchase_price": inv.purchase_price,
        "purchase_date": inv.purchase_date,
        "description": inv.description,
        "investment_type_id": inv.investment_type_id,
        "sip_amount": inv.sip_amount,
        "sip_frequency": inv.sip_frequency,
        "sip_start_date": inv.sip_start_date,
        "sip_end_date": inv.sip_end_date,
        "sip_day_of_month": inv.sip_day_of_month,
        "sip_total_installments": inv.sip_total_installments,
    }


class InvestmentRepository:
    async def get_type(self, db: AsyncSession, type_id: str) -> InvestmentType | None:
        result = await db.execute(_GET_TYPE_SQL, {"type_id": type_id})
        row = result.fetchone()
        return _row_to_type(row) if row else None

    async def list_types(self, db: AsyncSession) -> list[InvestmentType]:
        result = await db.execute(_LIST_TYPES_SQL)
        return [_row_to_type(row) for row in result.fetchall()]

    async def insert(self, db: AsyncSession, investment: Investment) -> Investment:
        params = _write_params(investment)
        params.update(
            {
                "user_id": investment.user_id,
                "account_id": investment.account_id,
                "is_existing": investment.is_existing,
                "is_sip": investment.is_sip,
            }
        )
        result = await db.execute(_INSERT_SQL, params)
        row = result.fetchone()
        if row is None:
            raise InternalError("Investment insert returned no rows — this should never happen")
        return _row_to_investment(row)

    async def get(
        self,
        db: AsyncSession,
        investment_id: str,
        user_id: str,
        for_update: bool = False,
    ) -> Investment | None:
        sql = _GET_FOR_UPDATE_SQL if for_update else _GET_SQL
        result = await db.execute(sql, {"id": investment_id, "user_id": user_id})
        row = result.fetchone()
        return _row_to_investment(row) if row else None

    async def update(self, db: AsyncSession, investment: Investment) -> Investment:
        params = _write_params(investment)
        params["id"] = investment.id
        result = await db.execute(_UPDATE_SQL, params)
        row = result.fetchone()
        if row is None:
            raise InvestmentNotFoundError(investment.id)
        return _row_to_investment(row)

    async def soft_delete(self, db: AsyncSession, investment_id: str) -> None:
        result = await db.execute(_SOFT_DELETE_SQL, {"id": investment_id})
        if result.fetchone() is None:
            raise InvestmentNotFoundError(investment_id)

    async def record_withdrawal(
        self,
        db: AsyncSession,
        investment_id: str,
        withdrawal_amount: Decimal,
        status: str,
    ) -> Investment:
        result = await db.execute(
            _RECORD_WITHDRAWAL_SQL,
            {"id": investment_id, "withdrawal_amount": withdrawal_amount, "status": status},
        )
        row = result.fetchone()
        if row is None:
            raise InvestmentNotFoundError(investment_id)
        return _row_to_investment(row)

    async def list_investments(
        self,
        db: AsyncSession,
        user_id: str,
        filters: InvestmentFilter,
        limit: int,
        offset: int,
    ) -> list[Investment]:
        result = await db.execute(
            _LIST_SQL,
            {
                "user_id": user_id,
                "start_date": filters.start_date,
                "end_date": filters.end_date,
                "type_id": filters.investment_type_id,
                "account_id": filters.account_id,
                "status": filters.status,
                "is_sip": filters.is_sip,
                "limit": limit,
                "offset": offset,
            },
        )
        return [_row_to_investment(row) for row in result.fetchall()]

    async def sip_exists_for_date(
        self, db: AsyncSession, investment_id: str, transaction_date: date
    ) -> bool:
        result = await db.execute(
            _SIP_EXISTS_SQL,
            {"investment_id": investment_id, "transaction_date": transaction_date},
        )
        return result.fetchone() is not None

    async def insert_sip_transaction(
        self, db: AsyncSession, sip: SipTransaction
    ) -> SipTransaction:
        result = await db.execute(
            _INSERT_SIP_SQL,
            {
                "investment_id": sip.investment_id,
                "account_id": sip.account_id,
                "amount": sip.amount,
                "transaction_date": sip.transaction_date,
                "status": sip.status,
                "processed_at": sip.processed_at,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("SIP insert returned no rows — this should never happen")
        return _row_to_sip(row)

    async def increment_installments(self, db: AsyncSession, investment_id: str) -> int:
        result = await db.execute(_INCREMENT_INSTALLMENTS_SQL, {"id": investment_id})
        row = result.fetchone()
        if row is None:
            raise InvestmentNotFoundError(investment_id)
        return int(row[0])

    async def list_sip_transactions(
        self, db: AsyncSession, investment_id: str
    ) -> list[SipTransaction]:
        result = await db.execute(_LIST_SIP_SQL, {"investment_id": investment_id})
        return [_row_to_sip(row) for row in result.fetchall()]
