"""Pydantic schemas for the expense and income APIs."""

from datetime import date
from decimal import Decimal
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field

from src.pf_common.money import money_to_display
from src.pf_transaction.domain.models import Transaction

# Clients may send the date under the table's own column name.
_DATE_ALIASES = AliasChoices("transaction_date", "expense_date", "income_date")

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateTransactionRequest(BaseModel):
    account_id: UUID
    category_id: UUID
    # Positivity is checked by the service so internal callers get the same rule.
    amount: Decimal = Field(..., max_digits=14, decimal_places=2)
    transaction_date: date | None = Field(None, validation_alias=_DATE_ALIASES)
    description: str | None = Field(None, max_length=500)


class UpdateTransactionRequest(BaseModel):
    """Partial update. account_id cannot change."""
    amount: Decimal | None = Field(None, max_digits=14, decimal_places=2)
    transaction_date: date | None = Field(None, validation_alias=_DATE_ALIASES)
    category_id: UUID | None = None
    description: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TransactionResponse(BaseModel):
    id: str
    kind: str
    account_id: str
    category_id: str
    amount: Decimal
    amount_display: str
    transaction_date: date
    description: str | None
    created_at: str  # ISO8601 string

    @classmethod
    def from_domain(cls, txn: Transaction) -> "TransactionResponse":
        return cls(
            id=txn.id,
            kind=txn.kind.value,
            account_id=txn.account_id,
            category_id=txn.category_id,
            amount=txn.amount,
            amount_display=money_to_display(txn.amount),
            transaction_date=txn.transaction_date,
            description=txn.description,
            created_at=txn.created_at.isoformat() if txn.created_at else "",
        )


class TransactionListResponse(BaseModel):
    items: list[TransactionResponse]
    limit: int
    offset: int
