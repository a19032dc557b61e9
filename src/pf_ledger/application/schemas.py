"""Pydantic schemas and cursor utilities for pf_ledger API."""

import base64
import json
from decimal import Decimal

from pydantic import BaseModel

from src.pf_common.money import money_to_display
from src.pf_ledger.domain.models import LedgerEntry

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_id: int) -> str:
    """Encode a BIGINT primary key into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor string back to the last seen id. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(payload["id"])
    except (ValueError, KeyError, TypeError):
        return None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LedgerEntryItem(BaseModel):
    id: int
    account_id: str
    amount: Decimal
    amount_display: str
    reference_type: str
    reference_id: str
    created_at: str  # ISO8601 string

    @classmethod
    def from_domain(cls, entry: LedgerEntry) -> "LedgerEntryItem":
        provenance = entry.provenance
        return cls(
            id=entry.id,
            account_id=entry.account_id,
            amount=entry.amount,
            amount_display=money_to_display(entry.amount),
            reference_type=provenance.type.value,
            reference_id=provenance.id,
            created_at=entry.created_at.isoformat() if entry.created_at else "",
        )


class LedgerResponse(BaseModel):
    items: list[LedgerEntryItem]
    next_cursor: str | None
    has_more: bool
