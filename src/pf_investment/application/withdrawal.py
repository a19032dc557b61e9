"""WithdrawalService — turn part or all of an investment into income.

A withdrawal is an income on the target account, recorded through
TransactionService.record() so it gets the same ledger row and kind routing
as any other income. Over-requests clamp to what remains; they never fail.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.domain.repository import AccountRepositoryProtocol
from src.pf_account.infrastructure.persistence import AccountRepository
from src.pf_category.application.service import CategoryService
from src.pf_common.enums import InvestmentStatus, TransactionKind
from src.pf_common.errors import (
    AccountNotFoundError,
    InvalidStateError,
    InvestmentNotFoundError,
    ValidationError,
)
from src.pf_common.money import ZERO, to_money
from src.pf_common.unit_of_work import UnitOfWork, default_unit_of_work
from src.pf_investment.application.schemas import WithdrawRequest, WithdrawResponse
from src.pf_investment.application.service import InvestmentService
from src.pf_investment.domain.repository import InvestmentRepositoryProtocol
from src.pf_investment.infrastructure.persistence import InvestmentRepository
from src.pf_transaction.application.schemas import TransactionResponse
from src.pf_transaction.application.service import TransactionService

logger = logging.getLogger(__name__)


def clamp_withdrawal(
    total: Decimal, already_withdrawn: Decimal, requested: Decimal | None
) -> tuple[Decimal, Decimal]:
    """Return (actual, remaining). `requested=None` asks for the full amount."""
    remaining = total - already_withdrawn
    wanted = requested if requested is not None else total
    return min(wanted, remaining), remaining


class WithdrawalService:
    def __init__(
        self,
        repo: InvestmentRepositoryProtocol | None = None,
        account_repo: AccountRepositoryProtocol | None = None,
        transactions: TransactionService | None = None,
        categories: CategoryService | None = None,
        investments: InvestmentService | None = None,
        uow: UnitOfWork | None = None,
    ) -> None:
        self._repo: InvestmentRepositoryProtocol = repo or InvestmentRepository()
        self._accounts: AccountRepositoryProtocol = account_repo or AccountRepository()
        self._transactions = transactions or TransactionService(account_repo=self._accounts)
        self._categories = categories or CategoryService()
        self._investments = investments or InvestmentService(
            repo=self._repo, account_repo=self._accounts
        )
        self._uow = uow or default_unit_of_work

    async def withdraw(
        self,
        db: AsyncSession,
        user_id: str,
        investment_id: str,
        req: WithdrawRequest,
    ) -> WithdrawResponse:
        if req.withdrawal_amount is not None and to_money(req.withdrawal_amount) <= ZERO:
            raise ValidationError("withdrawal_amount must be greater than 0")
        target_id = str(req.target_account_id)

        async with self._uow.atomic(db, investment_id, target_id):
            investment = await self._repo.get(db, investment_id, user_id, for_update=True)
            if investment is None:
                raise InvestmentNotFoundError(investment_id)
            if not investment.is_active:
                raise InvalidStateError(investment_id, investment.status)
            if await self._accounts.get_account(db, target_id, user_id) is None:
                raise AccountNotFoundError(target_id)

            actual, remaining = clamp_withdrawal(
                investment.amount or ZERO,
                investment.withdrawal_amount,
                req.withdrawal_amount,
            )
            if remaining <= ZERO:
                # Fully drawn down but still marked active.
                raise InvalidStateError(investment_id, InvestmentStatus.WITHDRAWN.value)

            category = await self._categories.resolve_withdrawal_category(db, user_id)
            income = await self._transactions.record(
                db,
                user_id,
                TransactionKind.INCOME,
                account_id=target_id,
                category_id=category.id,
                amount=actual,
                transaction_date=req.withdrawal_date,
                description=req.description or f"Withdrawal from {investment.name}",
            )

            full = actual >= remaining
            status = InvestmentStatus.WITHDRAWN if full else InvestmentStatus.ACTIVE
            await self._repo.record_withdrawal(
                db, investment_id, investment.withdrawal_amount + actual, status.value
            )

        logger.info(
            "Withdrawal processed: investment=%s amount=%s remaining=%s full=%s",
            investment_id, actual, remaining - actual, full,
        )
        return WithdrawResponse(
            full_withdrawal=full,
            withdrawn_amount=actual,
            income=TransactionResponse.from_domain(income),
            investment=await self._investments.get(db, user_id, investment_id),
        )
