"""Repository Protocol for expenses and incomes."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_common.enums import TransactionKind
from src.pf_transaction.domain.models import Transaction, TransactionFilter


class TransactionRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, txn: Transaction) -> Transaction: ...

    async def get(
        self,
        db: AsyncSession,
        kind: TransactionKind,
        transaction_id: str,
        user_id: str,
        for_update: bool = False,
    ) -> Transaction | None: ...

    async def update(self, db: AsyncSession, txn: Transaction) -> Transaction: ...

    async def soft_delete(
        self, db: AsyncSession, kind: TransactionKind, transaction_id: str
    ) -> None: ...

    async def list_transactions(
        self,
        db: AsyncSession,
        kind: TransactionKind,
        user_id: str,
        filters: TransactionFilter,
        limit: int,
        offset: int,
    ) -> list[Transaction]: ...
