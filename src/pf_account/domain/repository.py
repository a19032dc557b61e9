"""Repository Protocol — dependency inversion for testability.

Unit tests inject a fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.domain.models import Account, AccountDetails, BalanceMutation


class AccountRepositoryProtocol(Protocol):
    async def create_account(
        self, db: AsyncSession, account: Account, details: AccountDetails | None
    ) -> Account: ...

    async def get_account(
        self, db: AsyncSession, account_id: str, user_id: str, for_update: bool = False
    ) -> Account | None: ...

    async def get_details(
        self, db: AsyncSession, account_id: str
    ) -> AccountDetails | None: ...

    async def update_account(self, db: AsyncSession, account: Account) -> Account: ...

    async def list_accounts(
        self,
        db: AsyncSession,
        user_id: str,
        account_type: str | None,
        is_active: bool | None,
    ) -> list[Account]: ...

    async def balance_summary(
        self, db: AsyncSession, user_id: str
    ) -> dict[str, Decimal]: ...

    async def apply_mutation(
        self, db: AsyncSession, mutation: BalanceMutation
    ) -> Decimal: ...
