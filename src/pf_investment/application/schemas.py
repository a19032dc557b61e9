"""Pydantic schemas for pf_investment API."""

from datetime import date
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from src.pf_common.enums import InvestmentStatus, SipFrequency
from src.pf_common.money import money_to_display
from src.pf_investment.domain.models import Investment, InvestmentType, SipTransaction
from src.pf_transaction.application.schemas import TransactionResponse

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateInvestmentRequest(BaseModel):
    account_id: UUID | None = None
    investment_type_id: UUID
    name: str = Field(..., min_length=1, max_length=200)
    amount: Decimal | None = Field(None, max_digits=14, decimal_places=2)
    units: Decimal | None = Field(None, ge=0, max_digits=18, decimal_places=6)
    purchase_price: Decimal | None = Field(None, ge=0, max_digits=14, decimal_places=4)
    purchase_date: date | None = None
    description: str | None = Field(None, max_length=500)
    is_existing: bool = False
    is_sip: bool = False
    sip_amount: Decimal | None = Field(None, max_digits=14, decimal_places=2)
    sip_frequency: SipFrequency | None = None
    sip_start_date: date | None = None
    sip_end_date: date | None = None
    sip_day_of_month: int | None = Field(None, ge=1, le=28)
    sip_total_installments: int | None = Field(None, ge=1)


class UpdateInvestmentRequest(BaseModel):
    """Partial update. is_sip, is_existing and account_id cannot change."""
    name: str | None = Field(None, min_length=1, max_length=200)
    amount: Decimal | None = Field(None, max_digits=14, decimal_places=2)
    units: Decimal | None = Field(None, ge=0, max_digits=18, decimal_places=6)
    purchase_price: Decimal | None = Field(None, ge=0, max_digits=14, decimal_places=4)
    purchase_date: date | None = None
    description: str | None = Field(None, max_length=500)
    investment_type_id: UUID | None = None
    sip_amount: Decimal | None = Field(None, max_digits=14, decimal_places=2)
    sip_frequency: SipFrequency | None = None
    sip_start_date: date | None = None
    sip_end_date: date | None = None
    sip_day_of_month: int | None = Field(None, ge=1, le=28)
    sip_total_installments: int | None = Field(None, ge=1)


class ProcessSipRequest(BaseModel):
    transaction_date: date | None = None


class WithdrawRequest(BaseModel):
    target_account_id: UUID
    # Omitted means "everything": clamped to what remains.
    withdrawal_amount: Decimal | None = Field(None, max_digits=14, decimal_places=2)
    withdrawal_date: date | None = None
    description: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class InvestmentTypeResponse(BaseModel):
    id: str
    name: str
    description: str | None

    @classmethod
    def from_domain(cls, t: InvestmentType) -> "InvestmentTypeResponse":
        return cls(id=t.id, name=t.name, description=t.description)


class SipTransactionResponse(BaseModel):
    id: str
    account_id: str | None
    amount: Decimal
    transaction_date: date
    status: str
    processed_at: str | None

    @classmethod
    def from_domain(cls, sip: SipTransaction) -> "SipTransactionResponse":
        return cls(
            id=sip.id,
            account_id=sip.account_id,
            amount=sip.amount,
            transaction_date=sip.transaction_date,
            status=sip.status,
            processed_at=sip.processed_at.isoformat() if sip.processed_at else None,
        )


class InvestmentResponse(BaseModel):
    id: str
    account_id: str | None
    investment_type_id: str
    investment_type_name: str | None
    name: str
    amount: Decimal | None
    current_amount: Decimal
    current_amount_display: str
    withdrawal_amount: Decimal
    units: Decimal | None
    purchase_price: Decimal | None
    purchase_date: date
    description: str | None
    status: InvestmentStatus
    is_existing: bool
    is_sip: bool
    sip_amount: Decimal | None
    sip_frequency: str | None
    sip_start_date: date | None
    sip_end_date: date | None
    sip_day_of_month: int | None
    sip_installments_completed: int
    sip_total_installments: int | None
    sip_transactions: list[SipTransactionResponse] = []

    @classmethod
    def from_domain(
        cls, inv: Investment, sip_transactions: list[SipTransaction] | None = None
    ) -> "InvestmentResponse":
        return cls(
            id=inv.id,
            account_id=inv.account_id,
            investment_type_id=inv.investment_type_id,
            investment_type_name=inv.investment_type_name,
            name=inv.name,
            amount=inv.amount,
            current_amount=inv.current_amount,
            current_amount_display=money_to_display(inv.current_amount),
            withdrawal_amount=inv.withdrawal_amount,
            units=inv.units,
            purchase_price=inv.purchase_price,
            purchase_date=inv.purchase_date,
            description=inv.description,
            status=InvestmentStatus(inv.status),
            is_existing=inv.is_existing,
            is_sip=inv.is_sip,
            sip_amount=inv.sip_amount,
            sip_frequency=inv.sip_frequency,
            sip_start_date=inv.sip_start_date,
            sip_end_date=inv.sip_end_date,
            sip_day_of_month=inv.sip_day_of_month,
            sip_installments_completed=inv.sip_installments_completed,
            sip_total_installments=inv.sip_total_installments,
            sip_transactions=[
                SipTransactionResponse.from_domain(s) for s in sip_transactions or []
            ],
        )


class InvestmentListResponse(BaseModel):
    items: list[InvestmentResponse]
    limit: int
    offset: int


class ProcessSipResponse(BaseModel):
    processed: bool
    skip_reason: str | None
    sip_transaction: SipTransactionResponse | None
    investment: InvestmentResponse


class WithdrawResponse(BaseModel):
    full_withdrawal: bool
    withdrawn_amount: Decimal
    income: TransactionResponse
    investment: InvestmentResponse
