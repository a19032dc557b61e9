"""Domain models for pf_ledger — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum


class ProvenanceType(str, Enum):
    """Which transaction table a ledger row points back to."""
    EXPENSE = "expense"
    INCOME = "income"
    INVESTMENT = "investment"

    @property
    def column(self) -> str:
        return f"{self.value}_id"


@dataclass(frozen=True)
class Provenance:
    type: ProvenanceType
    id: str

    @classmethod
    def expense(cls, expense_id: str) -> "Provenance":
        return cls(ProvenanceType.EXPENSE, expense_id)

    @classmethod
    def income(cls, income_id: str) -> "Provenance":
        return cls(ProvenanceType.INCOME, income_id)

    @classmethod
    def investment(cls, investment_id: str) -> "Provenance":
        return cls(ProvenanceType.INVESTMENT, investment_id)


@dataclass
class LedgerEntry:
    id: int                          # BIGSERIAL
    account_id: str
    amount: Decimal                  # signed: negative=money out, positive=money in
    expense_id: str | None = None
    income_id: str | None = None
    investment_id: str | None = None
    created_at: datetime | None = None

    @property
    def provenance(self) -> Provenance:
        if self.expense_id is not None:
            return Provenance.expense(self.expense_id)
        if self.income_id is not None:
            return Provenance.income(self.income_id)
        if self.investment_id is not None:
            return Provenance.investment(self.investment_id)
        raise ValueError(f"Ledger entry {self.id} has no provenance")
