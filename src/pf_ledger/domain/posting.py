"""LedgerPoster — the one place where ledger rows and balances move together.

A Posting says "this transaction moves `amount` out of (DEBIT) or into
(CREDIT) this account". The account's kind decides which stored figure
changes; the ledger row always records the signed amount.

  post(p)            append ledger row, then apply the balance mutation
  revert(p)          delete ledger rows by provenance, then apply the inverse
  reverse_balance(p) apply the inverse only (soft-delete path: row stays)
  replace(old, ...)  revert(old) → persist field changes → post(new)

Every method runs inside the caller's UnitOfWork; nothing here commits.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.domain.kinds import kind_for
from src.pf_account.domain.models import BalanceMutation
from src.pf_account.domain.repository import AccountRepositoryProtocol
from src.pf_ledger.domain.models import LedgerEntry, Provenance
from src.pf_ledger.domain.repository import LedgerRepositoryProtocol

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PostingDirection(str, Enum):
    DEBIT = "debit"      # money leaves the account
    CREDIT = "credit"    # money arrives in the account


@dataclass(frozen=True)
class Posting:
    account_id: str
    account_type: str
    provenance: Provenance
    amount: Decimal                  # magnitude, always > 0
    direction: PostingDirection

    @property
    def signed_amount(self) -> Decimal:
        return -self.amount if self.direction is PostingDirection.DEBIT else self.amount

    def mutation(self) -> BalanceMutation:
        kind = kind_for(self.account_type)
        if self.direction is PostingDirection.DEBIT:
            return kind.apply_debit(self.account_id, self.amount)
        return kind.apply_credit(self.account_id, self.amount)


class LedgerPoster:
    def __init__(
        self,
        account_repo: AccountRepositoryProtocol,
        ledger_repo: LedgerRepositoryProtocol,
    ) -> None:
        self._accounts = account_repo
        self._ledger = ledger_repo

    async def post(self, db: AsyncSession, posting: Posting) -> LedgerEntry:
        entry = await self._ledger.append(
            db, posting.account_id, posting.signed_amount, posting.provenance
        )
        mutation = posting.mutation()
        new_value = await self._accounts.apply_mutation(db, mutation)
        logger.info(
            "Posted %s %s on account=%s (%s -> %s) ref=%s:%s",
            posting.direction.value,
            posting.amount,
            posting.account_id,
            mutation.field.value,
            new_value,
            posting.provenance.type.value,
            posting.provenance.id,
        )
        return entry

    async def revert(self, db: AsyncSession, posting: Posting) -> None:
        # Ledger rows go first so no reader sees a row without its balance effect.
        await self._ledger.delete_by_provenance(db, posting.provenance)
        await self._accounts.apply_mutation(db, posting.mutation().inverse())

    async def reverse_balance(self, db: AsyncSession, posting: Posting) -> None:
        new_value = await self._accounts.apply_mutation(db, posting.mutation().inverse())
        logger.info(
            "Reversed %s %s on account=%s (now %s) ref=%s:%s",
            posting.direction.value,
            posting.amount,
            posting.account_id,
            new_value,
            posting.provenance.type.value,
            posting.provenance.id,
        )

    async def replace(
        self,
        db: AsyncSession,
        old: Posting | None,
        persist: Callable[[], Awaitable[T]],
        build_new: Callable[[T], Posting | None],
    ) -> T:
        """Revert-then-reapply edit.

        `old` is the effect currently on the books (None if there is none),
        `persist` writes the field changes and returns the updated record, and
        `build_new` derives the effect the updated record should have.
        """
        if old is not None:
            await self.revert(db, old)
        updated = await persist()
        new = build_new(updated)
        if new is not None:
            await self.post(db, new)
        return updated
