"""Domain models for pf_transaction — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from src.pf_common.enums import TransactionKind
from src.pf_ledger.domain.models import Provenance, ProvenanceType
from src.pf_ledger.domain.posting import Posting, PostingDirection


@dataclass
class Transaction:
    """An expense or an income row. `kind` picks the table."""
    id: str
    kind: TransactionKind
    user_id: str
    account_id: str                  # immutable after create
    category_id: str
    amount: Decimal                  # always > 0
    transaction_date: date
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def provenance(self) -> Provenance:
        return Provenance(ProvenanceType(self.kind.value), self.id)

    def posting(self, account_type: str) -> Posting:
        """The ledger effect this row has on its account while it is live."""
        direction = (
            PostingDirection.DEBIT
            if self.kind is TransactionKind.EXPENSE
            else PostingDirection.CREDIT
        )
        return Posting(
            account_id=self.account_id,
            account_type=account_type,
            provenance=self.provenance,
            amount=self.amount,
            direction=direction,
        )


@dataclass
class TransactionFilter:
    start_date: date | None = None
    end_date: date | None = None
    category_id: str | None = None
    account_id: str | None = None
