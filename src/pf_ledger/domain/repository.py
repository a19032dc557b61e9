"""Repository Protocol for the append-only ledger journal."""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_ledger.domain.models import LedgerEntry, Provenance


class LedgerRepositoryProtocol(Protocol):
    async def append(
        self,
        db: AsyncSession,
        account_id: str,
        amount: Decimal,
        provenance: Provenance,
    ) -> LedgerEntry: ...

    async def delete_by_provenance(
        self, db: AsyncSession, provenance: Provenance
    ) -> int: ...

    async def list_for_account(
        self,
        db: AsyncSession,
        account_id: str,
        cursor_id: int | None,
        limit: int,
    ) -> list[LedgerEntry]: ...
