"""Domain models for pf_account — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from src.pf_common.enums import BalanceField


@dataclass
class Account:
    id: str
    user_id: str
    name: str
    type: str                        # AccountType value
    currency: str
    balance: Decimal                 # signed; overdraft/debt allowed
    institution_name: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class AccountDetails:
    """Type-specific figures; present only for credit_card and loan accounts."""
    account_id: str
    credit_limit: Decimal | None = None
    available_credit: Decimal | None = None
    loan_amount: Decimal | None = None
    loan_balance: Decimal | None = None      # authoritative outstanding principal
    interest_rate: Decimal | None = None     # annual %, 4 decimal places
    loan_term_months: int | None = None
    loan_start_date: date | None = None
    loan_due_date: date | None = None
    current_monthly_payment: Decimal | None = None

    @property
    def utilized_credit(self) -> Decimal | None:
        if self.credit_limit is None or self.available_credit is None:
            return None
        return self.credit_limit - self.available_credit


@dataclass(frozen=True)
class BalanceMutation:
    """A signed change to exactly one stored figure of one account."""
    account_id: str
    field: BalanceField
    delta: Decimal

    def inverse(self) -> "BalanceMutation":
        return BalanceMutation(self.account_id, self.field, -self.delta)
