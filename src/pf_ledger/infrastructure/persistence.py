"""LedgerRepository — SQL for ledger_entries.

Rows are appended, and removed only by provenance during replace-on-edit.
Called within the caller's transaction; never commits.
"""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_common.errors import InternalError
from src.pf_ledger.domain.models import LedgerEntry, Provenance, ProvenanceType

_INSERT_LEDGER_SQL = text("""
    INSERT INTO ledger_entries
        (account_id, amount, expense_id, income_id, investment_id)
    VALUES
        (:account_id, :amount, :expense_id, :income_id, :investment_id)
    RETURNING id, account_id, amount, expense_id, income_id, investment_id, created_at
""")

# One statement per provenance column; the column name never comes from input.
_DELETE_BY_PROVENANCE_SQL = {
    ptype: text(f"DELETE FROM ledger_entries WHERE {ptype.column} = :ref_id")
    for ptype in ProvenanceType
}

_LIST_FOR_ACCOUNT_SQL = text("""
    SELECT id, account_id, amount, expense_id, income_id, investment_id, created_at
    FROM ledger_entries
    WHERE account_id = :account_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < CAST(:cursor_id AS BIGINT))
    ORDER BY id DESC
    LIMIT :limit
""")


def _opt_str(value: object) -> str | None:
    return str(value) if value is not None else None


def _row_to_ledger(row: object) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        account_id=str(row.account_id),  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        expense_id=_opt_str(row.expense_id),  # type: ignore[attr-defined]
        income_id=_opt_str(row.income_id),  # type: ignore[attr-defined]
        investment_id=_opt_str(row.investment_id),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class LedgerRepository:
    async def append(
        self,
        db: AsyncSession,
        account_id: str,
        amount: Decimal,
        provenance: Provenance,
    ) -> LedgerEntry:
        params: dict[str, object] = {
            "account_id": account_id,
            "amount": amount,
            "expense_id": None,
            "income_id": None,
            "investment_id": None,
        }
        params[provenance.type.column] = provenance.id
        result = await db.execute(_INSERT_LEDGER_SQL, params)
        row = result.fetchone()
        if row is None:
            raise InternalError("Ledger insert returned no rows — this should never happen")
        return _row_to_ledger(row)

    async def delete_by_provenance(
        self, db: AsyncSession, provenance: Provenance
    ) -> int:
        result = await db.execute(
            _DELETE_BY_PROVENANCE_SQL[provenance.type], {"ref_id": provenance.id}
        )
        return int(result.rowcount or 0)  # type: ignore[attr-defined]

    async def list_for_account(
        self,
        db: AsyncSession,
        account_id: str,
        cursor_id: int | None,
        limit: int,
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LIST_FOR_ACCOUNT_SQL,
            {"account_id": account_id, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_ledger(row) for row in result.fetchall()]
