"""Domain models for pf_investment — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from src.pf_common.enums import InvestmentStatus
from src.pf_common.errors import InternalError
from src.pf_common.money import ZERO
from src.pf_ledger.domain.models import Provenance
from src.pf_ledger.domain.posting import Posting, PostingDirection


@dataclass
class InvestmentType:
    id: str
    name: str                        # stocks, mutual_funds, bonds, etfs, real_estate, crypto, other
    description: str | None = None


@dataclass
class Investment:
    id: str
    user_id: str
    account_id: str | None           # funding account; None for existing holdings
    investment_type_id: str
    name: str
    amount: Decimal | None           # None for a pure SIP
    purchase_date: date
    status: str = InvestmentStatus.ACTIVE.value
    withdrawal_amount: Decimal = ZERO  # cumulative
    is_existing: bool = False
    units: Decimal | None = None
    purchase_price: Decimal | None = None
    description: str | None = None
    # SIP schedule
    is_sip: bool = False
    sip_amount: Decimal | None = None
    sip_frequency: str | None = None
    sip_start_date: date | None = None
    sip_end_date: date | None = None
    sip_day_of_month: int | None = None
    sip_installments_completed: int = 0
    sip_total_installments: int | None = None
    investment_type_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status == InvestmentStatus.ACTIVE.value

    @property
    def current_amount(self) -> Decimal:
        return (self.amount or ZERO) - self.withdrawal_amount

    @property
    def has_purchase_effect(self) -> bool:
        """True when creating this investment debited its funding account once.

        Existing holdings never moved money; SIPs move money per installment.
        """
        return (
            not self.is_existing
            and not self.is_sip
            and self.account_id is not None
            and (self.amount or ZERO) > ZERO
        )

    def purchase_posting(self, account_type: str) -> Posting:
        if self.account_id is None or self.amount is None:
            raise InternalError(f"Investment {self.id} has no purchase to post")
        return Posting(
            account_id=self.account_id,
            account_type=account_type,
            provenance=Provenance.investment(self.id),
            amount=self.amount,
            direction=PostingDirection.DEBIT,
        )

    def installment_posting(self, account_type: str) -> Posting:
        if self.account_id is None or self.sip_amount is None:
            raise InternalError(f"Investment {self.id} has no installment to post")
        return Posting(
            account_id=self.account_id,
            account_type=account_type,
            provenance=Provenance.investment(self.id),
            amount=self.sip_amount,
            direction=PostingDirection.DEBIT,
        )


@dataclass
class SipTransaction:
    id: str
    investment_id: str
    account_id: str | None
    amount: Decimal
    transaction_date: date
    status: str                      # SipTransactionStatus value
    processed_at: datetime | None = None
    created_at: datetime | None = None


@dataclass
class InvestmentFilter:
    start_date: date | None = None
    end_date: date | None = None
    investment_type_id: str | None = None
    account_id: str | None = None
    status: str | None = None
    is_sip: bool | None = None
