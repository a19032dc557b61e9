"""Repository Protocol for investments, investment types and SIP installments."""

from datetime import date
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_investment.domain.models import (
    Investment,
    InvestmentFilter,
    InvestmentType,
    SipTransaction,
)


class InvestmentRepositoryProtocol(Protocol):
    async def get_type(self, db: AsyncSession, type_id: str) -> InvestmentType | None: ...

    async def list_types(self, db: AsyncSession) -> list[InvestmentType]: ...

    async def insert(self, db: AsyncSession, investment: Investment) -> Investment: ...

    async def get(
        self,
        db: AsyncSession,
        investment_id: str,
        user_id: str,
        for_update: bool = False,
    ) -> Investment | None: ...

    async def update(self, db: AsyncSession, investment: Investment) -> Investment: ...

    async def soft_delete(self, db: AsyncSession, investment_id: str) -> None: ...

    async def record_withdrawal(
        self,
        db: AsyncSession,
        investment_id: str,
        withdrawal_amount: Decimal,
        status: str,
    ) -> Investment: ...

    async def list_investments(
        self,
        db: AsyncSession,
        user_id: str,
        filters: InvestmentFilter,
        limit: int,
        offset: int,
    ) -> list[Investment]: ...

    async def sip_exists_for_date(
        self, db: AsyncSession, investment_id: str, transaction_date: date
    ) -> bool: ...

    async def insert_sip_transaction(
        self, db: AsyncSession, sip: SipTransaction
    ) -> SipTransaction: ...

    async def increment_installments(self, db: AsyncSession, investment_id: str) -> int: ...

    async def list_sip_transactions(
        self, db: AsyncSession, investment_id: str
    ) -> list[SipTransaction]: ...
