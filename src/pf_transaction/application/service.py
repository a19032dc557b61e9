"""TransactionService — expense and income lifecycle.

Every public write runs in one UnitOfWork keyed on the transaction's account:

  create  insert row → post ledger entry + balance effect
  update  revert old effect → persist fields → post new effect (LedgerPoster.replace)
  delete  soft delete → reverse balance effect; the ledger row is kept

`record()` is the create path without its own unit, for callers (withdrawals)
that already hold one.
"""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.domain.repository import AccountRepositoryProtocol
from src.pf_account.infrastructure.persistence import AccountRepository
from src.pf_category.application.service import CategoryService
from src.pf_common.datetime_utils import utc_today
from src.pf_common.enums import TransactionKind
from src.pf_common.errors import (
    AccountNotFoundError,
    TransactionNotFoundError,
    ValidationError,
)
from src.pf_common.money import validate_positive
from src.pf_common.unit_of_work import UnitOfWork, default_unit_of_work
from src.pf_ledger.domain.posting import LedgerPoster
from src.pf_ledger.domain.repository import LedgerRepositoryProtocol
from src.pf_ledger.infrastructure.persistence import LedgerRepository
from src.pf_transaction.application.schemas import (
    CreateTransactionRequest,
    TransactionListResponse,
    TransactionResponse,
    UpdateTransactionRequest,
)
from src.pf_transaction.domain.models import Transaction, TransactionFilter
from src.pf_transaction.domain.repository import TransactionRepositoryProtocol
from src.pf_transaction.infrastructure.persistence import TransactionRepository

logger = logging.getLogger(__name__)


def _positive_amount(amount: Decimal) -> Decimal:
    try:
        return validate_positive(amount)
    except ValueError as e:
        raise ValidationError(str(e)) from None


class TransactionService:
    def __init__(
        self,
        repo: TransactionRepositoryProtocol | None = None,
        account_repo: AccountRepositoryProtocol | None = None,
        ledger_repo: LedgerRepositoryProtocol | None = None,
        categories: CategoryService | None = None,
        uow: UnitOfWork | None = None,
    ) -> None:
        self._repo: TransactionRepositoryProtocol = repo or TransactionRepository()
        self._accounts: AccountRepositoryProtocol = account_repo or AccountRepository()
        self._poster = LedgerPoster(self._accounts, ledger_repo or LedgerRepository())
        self._categories = categories or CategoryService()
        self._uow = uow or default_unit_of_work

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def record(
        self,
        db: AsyncSession,
        user_id: str,
        kind: TransactionKind,
        account_id: str,
        category_id: str,
        amount: Decimal,
        transaction_date: date | None = None,
        description: str | None = None,
    ) -> Transaction:
        """Insert a transaction and post its effect. Caller owns the unit."""
        amount = _positive_amount(amount)
        account = await self._accounts.get_account(db, account_id, user_id, for_update=True)
        if account is None:
            raise AccountNotFoundError(account_id)
        await self._categories.require_visible(db, user_id, category_id)

        txn = await self._repo.insert(
            db,
            Transaction(
                id="",
                kind=kind,
                user_id=user_id,
                account_id=account_id,
                category_id=category_id,
                amount=amount,
                transaction_date=transaction_date or utc_today(),
                description=description,
            ),
        )
        await self._poster.post(db, txn.posting(account.type))
        logger.info(
            "%s recorded: id=%s account=%s amount=%s",
            kind.value.capitalize(), txn.id, account_id, amount,
        )
        return txn

    async def create(
        self,
        db: AsyncSession,
        user_id: str,
        kind: TransactionKind,
        req: CreateTransactionRequest,
    ) -> TransactionResponse:
        account_id = str(req.account_id)
        async with self._uow.atomic(db, account_id):
            txn = await self.record(
                db,
                user_id,
                kind,
                account_id=account_id,
                category_id=str(req.category_id),
                amount=req.amount,
                transaction_date=req.transaction_date,
                description=req.description,
            )
        return TransactionResponse.from_domain(txn)

    async def update(
        self,
        db: AsyncSession,
        user_id: str,
        kind: TransactionKind,
        transaction_id: str,
        req: UpdateTransactionRequest,
    ) -> TransactionResponse:
        # Validate before the unit so a bad request never takes a lock.
        new_amount = _positive_amount(req.amount) if req.amount is not None else None
        current = await self._require(db, user_id, kind, transaction_id)

        async with self._uow.atomic(db, current.account_id):
            txn = await self._require(db, user_id, kind, transaction_id, for_update=True)
            account = await self._accounts.get_account(
                db, txn.account_id, user_id, for_update=True
            )
            if account is None:
                raise AccountNotFoundError(txn.account_id)
            if req.category_id is not None:
                await self._categories.require_visible(db, user_id, str(req.category_id))

            changed = replace(
                txn,
                amount=new_amount if new_amount is not None else txn.amount,
                transaction_date=req.transaction_date or txn.transaction_date,
                category_id=str(req.category_id) if req.category_id else txn.category_id,
                description=(
                    req.description
                    if "description" in req.model_fields_set
                    else txn.description
                ),
            )

            async def persist() -> Transaction:
                return await self._repo.update(db, changed)

            updated = await self._poster.replace(
                db,
                old=txn.posting(account.type),
                persist=persist,
                build_new=lambda t: t.posting(account.type),
            )
        logger.info(
            "%s updated: id=%s amount %s -> %s",
            kind.value.capitalize(), transaction_id, txn.amount, updated.amount,
        )
        return TransactionResponse.from_domain(updated)

    async def delete(
        self,
        db: AsyncSession,
        user_id: str,
        kind: TransactionKind,
        transaction_id: str,
    ) -> None:
        current = await self._require(db, user_id, kind, transaction_id)

        async with self._uow.atomic(db, current.account_id):
            txn = await self._require(db, user_id, kind, transaction_id, for_update=True)
            account = await self._accounts.get_account(
                db, txn.account_id, user_id, for_update=True
            )
            if account is None:
                raise AccountNotFoundError(txn.account_id)
            await self._repo.soft_delete(db, kind, txn.id)
            # Soft delete keeps the ledger row; only the balance effect is undone.
            await self._poster.reverse_balance(db, txn.posting(account.type))
        logger.info("%s deleted: id=%s", kind.value.capitalize(), transaction_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(
        self,
        db: AsyncSession,
        user_id: str,
        kind: TransactionKind,
        transaction_id: str,
    ) -> TransactionResponse:
        txn = await self._require(db, user_id, kind, transaction_id)
        return TransactionResponse.from_domain(txn)

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: str,
        kind: TransactionKind,
        filters: TransactionFilter,
        limit: int,
        offset: int,
    ) -> TransactionListResponse:
        txns = await self._repo.list_transactions(db, kind, user_id, filters, limit, offset)
        return TransactionListResponse(
            items=[TransactionResponse.from_domain(t) for t in txns],
            limit=limit,
            offset=offset,
        )

    async def _require(
        self,
        db: AsyncSession,
        user_id: str,
        kind: TransactionKind,
        transaction_id: str,
        for_update: bool = False,
    ) -> Transaction:
        txn = await self._repo.get(db, kind, transaction_id, user_id, for_update=for_update)
        if txn is None:
            raise TransactionNotFoundError(kind.value, transaction_id)
        return txn
