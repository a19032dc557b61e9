"""InvestmentService — purchases, SIP installments, edits and deletes.

Balance effects by investment shape:

  is_existing          none, ever (historical holding)
  one-time purchase    debit `amount` at create; revert-then-reapply on edit;
                       amount credited back on delete
  SIP                  debit `sip_amount` per processed installment; edits and
                       deletes never touch completed installments

Each public write runs in one UnitOfWork keyed on the funding account and the
investment, and re-reads the investment row FOR UPDATE.
"""

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.domain.models import Account
from src.pf_account.domain.repository import AccountRepositoryProtocol
from src.pf_account.infrastructure.persistence import AccountRepository
from src.pf_common.datetime_utils import utc_now, utc_today
from src.pf_common.enums import SipTransactionStatus
from src.pf_common.errors import (
    AccountNotFoundError,
    InternalError,
    InvalidStateError,
    InvestmentNotFoundError,
    InvestmentTypeNotFoundError,
    ValidationError,
)
from src.pf_common.money import validate_positive
from src.pf_common.unit_of_work import UnitOfWork, default_unit_of_work
from src.pf_investment.application.schemas import (
    CreateInvestmentRequest,
    InvestmentListResponse,
    InvestmentResponse,
    InvestmentTypeResponse,
    ProcessSipResponse,
    SipTransactionResponse,
    UpdateInvestmentRequest,
)
from src.pf_investment.domain.models import Investment, InvestmentFilter, SipTransaction
from src.pf_investment.domain.repository import InvestmentRepositoryProtocol
from src.pf_investment.domain.sip import SkipReason, installment_skip_reason
from src.pf_investment.infrastructure.persistence import InvestmentRepository
from src.pf_ledger.domain.posting import LedgerPoster
from src.pf_ledger.domain.repository import LedgerRepositoryProtocol
from src.pf_ledger.infrastructure.persistence import LedgerRepository

logger = logging.getLogger(__name__)


def _positive(amount: Decimal, field: str) -> Decimal:
    try:
        return validate_positive(amount, field)
    except ValueError as e:
        raise ValidationError(str(e)) from None


def _check_sip_schedule(investment: Investment) -> None:
    """A SIP keeps its amount, frequency and start date for later installments."""
    if not investment.is_sip:
        return
    if investment.sip_amount is None or investment.sip_frequency is None:
        raise ValidationError("sip_amount and sip_frequency are required for a SIP")
    if investment.sip_start_date is None:
        raise ValidationError("sip_start_date is required for a SIP")
    if investment.sip_end_date is not None and investment.sip_end_date < investment.sip_start_date:
        raise ValidationError("sip_end_date must not precede sip_start_date")


class InvestmentService:
    def __init__(
        self,
        repo: InvestmentRepositoryProtocol | None = None,
        account_repo: AccountRepositoryProtocol | None = None,
        ledger_repo: LedgerRepositoryProtocol | None = None,
        uow: UnitOfWork | None = None,
    ) -> None:
        self._repo: InvestmentRepositoryProtocol = repo or InvestmentRepository()
        self._accounts: AccountRepositoryProtocol = account_repo or AccountRepository()
        self._poster = LedgerPoster(self._accounts, ledger_repo or LedgerRepository())
        self._uow = uow or default_unit_of_work

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create(
        self, db: AsyncSession, user_id: str, req: CreateInvestmentRequest
    ) -> InvestmentResponse:
        account_id = str(req.account_id) if req.account_id else None
        investment = self._build_investment(user_id, account_id, req)

        async with self._uow.atomic(db, account_id):
            type_id = investment.investment_type_id
            if await self._repo.get_type(db, type_id) is None:
                raise InvestmentTypeNotFoundError(type_id)
            account = await self._load_account(db, user_id, account_id)

            created = await self._repo.insert(db, investment)
            if created.is_existing:
                logger.info("Existing investment recorded without balance effect: id=%s", created.id)
            elif created.is_sip:
                if created.sip_start_date is None:
                    raise InternalError(f"SIP {created.id} stored without sip_start_date")
                await self._apply_installment(db, created, account, created.sip_start_date)
            elif created.has_purchase_effect:
                if account is None:
                    raise InternalError(f"Purchase {created.id} has no funding account")
                await self._poster.post(db, created.purchase_posting(account.type))

        logger.info("Investment created: id=%s sip=%s", created.id, created.is_sip)
        return await self.get(db, user_id, created.id)

    def _build_investment(
        self, user_id: str, account_id: str | None, req: CreateInvestmentRequest
    ) -> Investment:
        """Validate the request shape and derive the row to insert. No I/O."""
        if not req.is_existing and account_id is None:
            raise ValidationError("account_id is required unless is_existing is set")

        amount = _positive(req.amount, "amount") if req.amount is not None else None
        sip_amount = None
        if req.is_sip:
            if req.sip_amount is None or req.sip_frequency is None:
                raise ValidationError("sip_amount and sip_frequency are required for a SIP")
            if req.sip_start_date is None:
                raise ValidationError("sip_start_date is required for a SIP")
            if req.sip_end_date is not None and req.sip_end_date < req.sip_start_date:
                raise ValidationError("sip_end_date must not precede sip_start_date")
            sip_amount = _positive(req.sip_amount, "sip_amount")
            amount = amount or sip_amount
            purchase_date = req.sip_start_date
        else:
            if amount is None:
                raise ValidationError("amount is required for a one-time purchase")
            purchase_date = req.purchase_date or utc_today()

        return Investment(
            id="",
            user_id=user_id,
            account_id=account_id,
            investment_type_id=str(req.investment_type_id),
            name=req.name,
            amount=amount,
            purchase_date=purchase_date,
            is_existing=req.is_existing,
            units=req.units,
            purchase_price=req.purchase_price,
            description=req.description,
            is_sip=req.is_sip,
            sip_amount=sip_amount,
            sip_frequency=req.sip_frequency.value if req.sip_frequency else None,
            sip_start_date=req.sip_start_date if req.is_sip else None,
            sip_end_date=req.sip_end_date if req.is_sip else None,
            sip_day_of_month=req.sip_day_of_month if req.is_sip else None,
            sip_total_installments=req.sip_total_installments if req.is_sip else None,
        )

    # ------------------------------------------------------------------
    # SIP installments
    # ------------------------------------------------------------------

    async def process_sip(
        self,
        db: AsyncSession,
        user_id: str,
        investment_id: str,
        on_date: date | None = None,
    ) -> ProcessSipResponse:
        current = await self._require(db, user_id, investment_id)
        on_date = on_date or utc_today()

        async with self._uow.atomic(db, current.account_id, investment_id):
            investment = await self._require(db, user_id, investment_id, for_update=True)
            if not investment.is_active:
                raise InvalidStateError(investment_id, investment.status)
            account = await self._load_account(db, user_id, investment.account_id)
            sip, reason = await self._apply_installment(db, investment, account, on_date)

        return ProcessSipResponse(
            processed=sip is not None,
            skip_reason=reason.value if reason else None,
            sip_transaction=SipTransactionResponse.from_domain(sip) if sip else None,
            investment=await self.get(db, user_id, investment_id),
        )

    async def _apply_installment(
        self,
        db: AsyncSession,
        investment: Investment,
        account: Account | None,
        on_date: date,
    ) -> tuple[SipTransaction | None, SkipReason | None]:
        """Run one installment inside the caller's unit, or report why not."""
        reason = installment_skip_reason(investment, on_date)
        if reason is None and await self._repo.sip_exists_for_date(db, investment.id, on_date):
            reason = SkipReason.DUPLICATE_DATE
        if reason is not None:
            logger.info(
                "SIP installment skipped: investment=%s date=%s reason=%s",
                investment.id, on_date, reason.value,
            )
            return None, reason

        if account is None or investment.sip_amount is None:
            raise ValidationError("a SIP installment needs a funding account and sip_amount")

        sip = await self._repo.insert_sip_transaction(
            db,
            SipTransaction(
                id="",
                investment_id=investment.id,
                account_id=account.id,
                amount=investment.sip_amount,
                transaction_date=on_date,
                status=SipTransactionStatus.COMPLETED.value,
                processed_at=utc_now(),
            ),
        )
        completed = await self._repo.increment_installments(db, investment.id)
        await self._poster.post(db, investment.installment_posting(account.type))
        logger.info(
            "SIP installment processed: investment=%s date=%s amount=%s (%s/%s)",
            investment.id, on_date, investment.sip_amount,
            completed, investment.sip_total_installments or "-",
        )
        return sip, None

    # ------------------------------------------------------------------
    # Update / delete
    # ------------------------------------------------------------------

    async def update(
        self,
        db: AsyncSession,
        user_id: str,
        investment_id: str,
        req: UpdateInvestmentRequest,
    ) -> InvestmentResponse:
        fields = req.model_dump(exclude_unset=True)
        if req.amount is not None:
            fields["amount"] = _positive(req.amount, "amount")
        if req.sip_amount is not None:
            fields["sip_amount"] = _positive(req.sip_amount, "sip_amount")
        if req.investment_type_id is not None:
            fields["investment_type_id"] = str(req.investment_type_id)
        if req.sip_frequency is not None:
            fields["sip_frequency"] = req.sip_frequency.value
        # Required columns cannot be cleared.
        for required in ("name", "amount", "purchase_date", "investment_type_id"):
            if required in fields and fields[required] is None:
                del fields[required]

        current = await self._require(db, user_id, investment_id)

        async with self._uow.atomic(db, current.account_id, investment_id):
            investment = await self._require(db, user_id, investment_id, for_update=True)
            if not investment.is_active:
                raise InvalidStateError(investment_id, investment.status)
            if "investment_type_id" in fields:
                if await self._repo.get_type(db, fields["investment_type_id"]) is None:
                    raise InvestmentTypeNotFoundError(fields["investment_type_id"])

            changed = replace(investment, **fields)
            _check_sip_schedule(changed)
            account = None
            if investment.has_purchase_effect or changed.has_purchase_effect:
                account = await self._load_account(db, user_id, investment.account_id)
            account_type = account.type if account else ""

            async def persist() -> Investment:
                return await self._repo.update(db, changed)

            await self._poster.replace(
                db,
                old=(
                    investment.purchase_posting(account_type)
                    if investment.has_purchase_effect
                    else None
                ),
                persist=persist,
                build_new=lambda inv: (
                    inv.purchase_posting(account_type) if inv.has_purchase_effect else None
                ),
            )

        logger.info("Investment updated: id=%s fields=%s", investment_id, sorted(fields))
        return await self.get(db, user_id, investment_id)

    async def delete(self, db: AsyncSession, user_id: str, investment_id: str) -> None:
        current = await self._require(db, user_id, investment_id)

        async with self._uow.atomic(db, current.account_id, investment_id):
            investment = await self._require(db, user_id, investment_id, for_update=True)
            await self._repo.soft_delete(db, investment_id)
            if investment.has_purchase_effect:
                account = await self._load_account(db, user_id, investment.account_id)
                if account is None:
                    raise InternalError(f"Purchase {investment_id} has no funding account")
                # Ledger row is kept, as for expense and income soft deletes.
                await self._poster.reverse_balance(
                    db, investment.purchase_posting(account.type)
                )
        logger.info("Investment deleted: id=%s", investment_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(
        self, db: AsyncSession, user_id: str, investment_id: str
    ) -> InvestmentResponse:
        investment = await self._require(db, user_id, investment_id)
        sips = (
            await self._repo.list_sip_transactions(db, investment_id)
            if investment.is_sip
            else []
        )
        return InvestmentResponse.from_domain(investment, sips)

    async def list_investments(
        self,
        db: AsyncSession,
        user_id: str,
        filters: InvestmentFilter,
        limit: int,
        offset: int,
    ) -> InvestmentListResponse:
        investments = await self._repo.list_investments(db, user_id, filters, limit, offset)
        return InvestmentListResponse(
            items=[InvestmentResponse.from_domain(i) for i in investments],
            limit=limit,
            offset=offset,
        )

    async def list_types(self, db: AsyncSession) -> list[InvestmentTypeResponse]:
        types = await self._repo.list_types(db)
        return [InvestmentTypeResponse.from_domain(t) for t in types]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _require(
        self,
        db: AsyncSession,
        user_id: str,
        investment_id: str,
        for_update: bool = False,
    ) -> Investment:
        investment = await self._repo.get(db, investment_id, user_id, for_update=for_update)
        if investment is None:
            raise InvestmentNotFoundError(investment_id)
        return investment

    async def _load_account(
        self, db: AsyncSession, user_id: str, account_id: str | None
    ) -> Account | None:
        if account_id is None:
            return None
        account = await self._accounts.get_account(db, account_id, user_id, for_update=True)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account
