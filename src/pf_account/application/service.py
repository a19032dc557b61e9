"""AccountApplicationService — account lifecycle and read-side composition.

Name, currency, institution and the active flag can be edited. Balances never
are: after creation they move only through the ledger posting primitive
(pf_ledger.domain.posting).
"""

import logging
from dataclasses import replace
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pf_account.application.schemas import (
    AccountListResponse,
    AccountResponse,
    BalanceSummaryResponse,
    CreateAccountRequest,
    UpdateAccountRequest,
)
from src.pf_account.domain.kinds import requires_details
from src.pf_account.domain.models import Account, AccountDetails
from src.pf_account.domain.repository import AccountRepositoryProtocol
from src.pf_account.infrastructure.persistence import AccountRepository
from src.pf_common.enums import AccountType
from src.pf_common.errors import AccountNotFoundError, ValidationError
from src.pf_common.money import ZERO, money_to_display, to_money
from src.pf_common.unit_of_work import UnitOfWork, default_unit_of_work

logger = logging.getLogger(__name__)


def _build_details(req: CreateAccountRequest) -> AccountDetails | None:
    if not requires_details(req.type):
        return None
    if req.type is AccountType.CREDIT_CARD:
        if req.credit_limit is None:
            raise ValidationError("credit_limit is required for credit_card accounts")
        available = req.available_credit if req.available_credit is not None else req.credit_limit
        return AccountDetails(
            account_id="",
            credit_limit=to_money(req.credit_limit),
            available_credit=to_money(available),
        )
    if req.loan_amount is None:
        raise ValidationError("loan_amount is required for loan accounts")
    outstanding = req.loan_balance if req.loan_balance is not None else req.loan_amount
    return AccountDetails(
        account_id="",
        loan_amount=to_money(req.loan_amount),
        loan_balance=to_money(outstanding),
        interest_rate=req.interest_rate,
        loan_term_months=req.loan_term_months,
        loan_start_date=req.loan_start_date,
        loan_due_date=req.loan_due_date,
        current_monthly_payment=req.current_monthly_payment,
    )


class AccountApplicationService:
    def __init__(
        self,
        repo: AccountRepositoryProtocol | None = None,
        uow: UnitOfWork | None = None,
    ) -> None:
        self._repo: AccountRepositoryProtocol = repo or AccountRepository()
        self._uow = uow or default_unit_of_work

    async def create_account(
        self, db: AsyncSession, user_id: str, req: CreateAccountRequest
    ) -> AccountResponse:
        details = _build_details(req)
        account = Account(
            id="",
            user_id=user_id,
            name=req.name,
            type=req.type.value,
            currency=(req.currency or settings.DEFAULT_CURRENCY).upper(),
            balance=to_money(req.balance),
            institution_name=req.institution_name,
        )
        async with self._uow.atomic(db):
            created = await self._repo.create_account(db, account, details)
        logger.info("Account created: id=%s type=%s", created.id, created.type)
        if details is not None:
            details.account_id = created.id
        return AccountResponse.from_domain(created, details)

    async def get_account(
        self, db: AsyncSession, user_id: str, account_id: str
    ) -> AccountResponse:
        account = await self._repo.get_account(db, account_id, user_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        details = None
        if requires_details(account.type):
            details = await self._repo.get_details(db, account.id)
        return AccountResponse.from_domain(account, details)

    async def update_account(
        self, db: AsyncSession, user_id: str, account_id: str, req: UpdateAccountRequest
    ) -> AccountResponse:
        fields = req.model_dump(exclude_unset=True)
        # name, currency and is_active are NOT NULL columns.
        for required in ("name", "currency", "is_active"):
            if required in fields and fields[required] is None:
                del fields[required]
        if "currency" in fields:
            fields["currency"] = fields["currency"].upper()
        return await self._update(db, user_id, account_id, fields)

    async def deactivate_account(
        self, db: AsyncSession, user_id: str, account_id: str
    ) -> AccountResponse:
        """Hide the account from active listings and the summary. Ledger rows stay."""
        return await self._update(db, user_id, account_id, {"is_active": False})

    async def reactivate_account(
        self, db: AsyncSession, user_id: str, account_id: str
    ) -> AccountResponse:
        return await self._update(db, user_id, account_id, {"is_active": True})

    async def _update(
        self, db: AsyncSession, user_id: str, account_id: str, fields: dict[str, Any]
    ) -> AccountResponse:
        async with self._uow.atomic(db, account_id):
            account = await self._repo.get_account(db, account_id, user_id, for_update=True)
            if account is None:
                raise AccountNotFoundError(account_id)
            updated = await self._repo.update_account(db, replace(account, **fields))
        logger.info("Account updated: id=%s fields=%s", account_id, sorted(fields))
        return await self.get_account(db, user_id, updated.id)

    async def list_accounts(
        self,
        db: AsyncSession,
        user_id: str,
        account_type: str | None,
        is_active: bool | None,
    ) -> AccountListResponse:
        accounts = await self._repo.list_accounts(db, user_id, account_type, is_active)
        return AccountListResponse(
            accounts=[AccountResponse.from_domain(a) for a in accounts]
        )

    async def balance_summary(
        self, db: AsyncSession, user_id: str
    ) -> BalanceSummaryResponse:
        by_type = await self._repo.balance_summary(db, user_id)
        total = sum(by_type.values(), ZERO)
        return BalanceSummaryResponse(
            total_balance=total,
            total_balance_display=money_to_display(total),
            by_type=by_type,
        )
