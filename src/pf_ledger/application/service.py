"""LedgerApplicationService — read-only journal pages for one account."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.domain.repository import AccountRepositoryProtocol
from src.pf_account.infrastructure.persistence import AccountRepository
from src.pf_common.errors import AccountNotFoundError
from src.pf_ledger.application.schemas import (
    LedgerEntryItem,
    LedgerResponse,
    cursor_decode,
    cursor_encode,
)
from src.pf_ledger.domain.repository import LedgerRepositoryProtocol
from src.pf_ledger.infrastructure.persistence import LedgerRepository


class LedgerApplicationService:
    def __init__(
        self,
        account_repo: AccountRepositoryProtocol | None = None,
        ledger_repo: LedgerRepositoryProtocol | None = None,
    ) -> None:
        self._accounts: AccountRepositoryProtocol = account_repo or AccountRepository()
        self._ledger: LedgerRepositoryProtocol = ledger_repo or LedgerRepository()

    async def list_ledger(
        self,
        db: AsyncSession,
        user_id: str,
        account_id: str,
        cursor: str | None,
        limit: int,
    ) -> LedgerResponse:
        account = await self._accounts.get_account(db, account_id, user_id)
        if account is None:
            raise AccountNotFoundError(account_id)

        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._ledger.list_for_account(db, account_id, cursor_id, limit + 1)
        has_more = len(entries) > limit
        page = entries[:limit]

        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return LedgerResponse(
            items=[LedgerEntryItem.from_domain(e) for e in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )
