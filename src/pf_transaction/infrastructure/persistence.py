"""TransactionRepository — SQL for the expenses and incomes tables.

The two tables share a shape and differ only in name and date column, so each
statement is built once per TransactionKind at import time. Table and column
names come from the constant map below, never from input.

Reads exclude soft-deleted rows. Never commits.
"""

from sqlalchemy import TextClause, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_common.enums import TransactionKind
from src.pf_common.errors import InternalError, TransactionNotFoundError
from src.pf_transaction.domain.models import Transaction, TransactionFilter

_TABLES: dict[TransactionKind, tuple[str, str]] = {
    TransactionKind.EXPENSE: ("expenses", "expense_date"),
    TransactionKind.INCOME: ("incomes", "income_date"),
}


def _columns(date_column: str) -> str:
    return (
        "id, user_id, account_id, category_id, amount, "
        f"{date_column} AS transaction_date, description, "
        "created_at, updated_at, deleted_at"
    )


def _build_statements(table: str, date_column: str) -> dict[str, TextClause]:
    cols = _columns(date_column)
    return {
        "insert": text(f"""
            INSERT INTO {table}
                (user_id, account_id, category_id, amount, {date_column}, description)
            VALUES
                (:user_id, :account_id, :category_id, :amount, :transaction_date, :description)
            RETURNING {cols}
        """),
        "get": text(f"""
            SELECT {cols}
            FROM {table}
            WHERE id = :id AND user_id = :user_id AND deleted_at IS NULL
        """),
        "get_for_update": text(f"""
            SELECT {cols}
            FROM {table}
            WHERE id = :id AND user_id = :user_id AND deleted_at IS NULL
            FOR UPDATE
        """),
        "update": text(f"""
            UPDATE {table}
            SET amount = :amount,
                {date_column} = :transaction_date,
                category_id = :category_id,
                description = :description,
                updated_at = NOW()
            WHERE id = :id AND deleted_at IS NULL
            RETURNING {cols}
        """),
        "soft_delete": text(f"""
            UPDATE {table}
            SET deleted_at = NOW()
            WHERE id = :id AND deleted_at IS NULL
            RETURNING id
        """),
        "list": text(f"""
            SELECT {cols}
            FROM {table}
            WHERE user_id = :user_id
              AND deleted_at IS NULL
              AND (CAST(:start_date AS DATE) IS NULL OR {date_column} >= CAST(:start_date AS DATE))
              AND (CAST(:end_date AS DATE) IS NULL OR {date_column} <= CAST(:end_date AS DATE))
              AND (CAST(:category_id AS UUID) IS NULL OR category_id = CAST(:category_id AS UUID))
              AND (CAST(:account_id AS UUID) IS NULL OR account_id = CAST(:account_id AS UUID))
            ORDER BY {date_column} DESC, created_at DESC
            LIMIT :limit OFFSET :offset
        """),
    }


_SQL: dict[TransactionKind, dict[str, TextClause]] = {
    kind: _build_statements(table, date_column)
    for kind, (table, date_column) in _TABLES.items()
}


def _row_to_transaction(kind: TransactionKind, row: object) -> Transaction:
    return Transaction(
        id=str(row.id),  # type: ignore[attr-defined]
        kind=kind,
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        account_id=str(row.account_id),  # type: ignore[attr-defined]
        category_id=str(row.category_id),  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        transaction_date=row.transaction_date,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
        deleted_at=row.deleted_at,  # type: ignore[attr-defined]
    )


class TransactionRepository:
    async def insert(self, db: AsyncSession, txn: Transaction) -> Transaction:
        result = await db.execute(
            _SQL[txn.kind]["insert"],
            {
                "user_id": txn.user_id,
                "account_id": txn.account_id,
                "category_id": txn.category_id,
                "amount": txn.amount,
                "transaction_date": txn.transaction_date,
                "description": txn.description,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError(f"{txn.kind.value} insert returned no rows — this should never happen")
        return _row_to_transaction(txn.kind, row)

    async def get(
        self,
        db: AsyncSession,
        kind: TransactionKind,
        transaction_id: str,
        user_id: str,
        for_update: bool = False,
    ) -> Transaction | None:
        sql = _SQL[kind]["get_for_update" if for_update else "get"]
        result = await db.execute(sql, {"id": transaction_id, "user_id": user_id})
        row = result.fetchone()
        return _row_to_transaction(kind, row) if row else None

    async def update(self, db: AsyncSession, txn: Transaction) -> Transaction:
        result = await db.execute(
            _SQL[txn.kind]["update"],
            {
                "id": txn.id,
                "amount": txn.amount,
                "transaction_date": txn.transaction_date,
                "category_id": txn.category_id,
                "description": txn.description,
            },
        )
        row = result.fetchone()
        if row is None:
            raise TransactionNotFoundError(txn.kind.value, txn.id)
        return _row_to_transaction(txn.kind, row)

    async def soft_delete(
        self, db: AsyncSession, kind: TransactionKind, transaction_id: str
    ) -> None:
        result = await db.execute(_SQL[kind]["soft_delete"], {"id": transaction_id})
        if result.fetchone() is None:
            raise TransactionNotFoundError(kind.value, transaction_id)

    async def list_transactions(
        self,
        db: AsyncSession,
        kind: TransactionKind,
        user_id: str,
        filters: TransactionFilter,
        limit: int,
        offset: int,
    ) -> list[Transaction]:
        result = await db.execute(
            _SQL[kind]["list"],
            {
                "user_id": user_id,
                "start_date": filters.start_date,
                "end_date": filters.end_date,
                "category_id": filters.category_id,
                "account_id": filters.account_id,
                "limit": limit,
                "offset": offset,
            },
        )
        return [_row_to_transaction(kind, row) for row in result.fetchall()]
