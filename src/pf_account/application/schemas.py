"""Pydantic schemas for pf_account API."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from src.pf_account.domain.models import Account, AccountDetails
from src.pf_common.enums import AccountType
from src.pf_common.money import money_to_display

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateAccountRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: AccountType
    currency: str | None = Field(None, min_length=3, max_length=3)
    institution_name: str | None = Field(None, max_length=100)
    balance: Decimal = Field(Decimal("0"), max_digits=14, decimal_places=2)
    # credit_card
    credit_limit: Decimal | None = Field(None, ge=0, max_digits=14, decimal_places=2)
    available_credit: Decimal | None = Field(None, max_digits=14, decimal_places=2)
    # loan
    loan_amount: Decimal | None = Field(None, ge=0, max_digits=14, decimal_places=2)
    loan_balance: Decimal | None = Field(None, max_digits=14, decimal_places=2)
    interest_rate: Decimal | None = Field(None, ge=0, max_digits=7, decimal_places=4)
    loan_term_months: int | None = Field(None, ge=1)
    loan_start_date: date | None = None
    loan_due_date: date | None = None
    current_monthly_payment: Decimal | None = Field(
        None, ge=0, max_digits=14, decimal_places=2
    )


class UpdateAccountRequest(BaseModel):
    """Descriptive fields only. Balances move through the ledger, never here."""
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, min_length=1, max_length=200)
    currency: str | None = Field(None, min_length=3, max_length=3)
    institution_name: str | None = Field(None, max_length=100)
    is_active: bool | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AccountDetailsResponse(BaseModel):
    credit_limit: Decimal | None
    available_credit: Decimal | None
    utilized_credit: Decimal | None
    loan_amount: Decimal | None
    loan_balance: Decimal | None
    interest_rate: Decimal | None
    loan_term_months: int | None
    loan_start_date: date | None
    loan_due_date: date | None
    current_monthly_payment: Decimal | None

    @classmethod
    def from_domain(cls, details: AccountDetails) -> "AccountDetailsResponse":
        return cls(
            credit_limit=details.credit_limit,
            available_credit=details.available_credit,
            utilized_credit=details.utilized_credit,
            loan_amount=details.loan_amount,
            loan_balance=details.loan_balance,
            interest_rate=details.interest_rate,
            loan_term_months=details.loan_term_months,
            loan_start_date=details.loan_start_date,
            loan_due_date=details.loan_due_date,
            current_monthly_payment=details.current_monthly_payment,
        )


class AccountResponse(BaseModel):
    id: str
    name: str
    type: str
    currency: str
    balance: Decimal
    balance_display: str
    institution_name: str | None
    is_active: bool
    details: AccountDetailsResponse | None = None

    @classmethod
    def from_domain(
        cls, account: Account, details: AccountDetails | None = None
    ) -> "AccountResponse":
        return cls(
            id=account.id,
            name=account.name,
            type=account.type,
            currency=account.currency,
            balance=account.balance,
            balance_display=money_to_display(account.balance),
            institution_name=account.institution_name,
            is_active=account.is_active,
            details=AccountDetailsResponse.from_domain(details) if details else None,
        )


class AccountListResponse(BaseModel):
    accounts: list[AccountResponse]


class BalanceSummaryResponse(BaseModel):
    total_balance: Decimal
    total_balance_display: str
    by_type: dict[str, Decimal]
