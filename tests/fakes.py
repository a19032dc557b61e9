"""In-memory repositories that satisfy the repository Protocols.

FakeSession stands in for AsyncSession: commit() snapshots every store and
rollback() restores the last snapshot, so tests can assert that a failed unit
left no partial writes behind.
"""

import copy
import uuid
from dataclasses import replace
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

from src.pf_account.domain.models import Account, AccountDetails, BalanceMutation
from src.pf_category.domain.models import Category
from src.pf_common.enums import AccountType, BalanceField, TransactionKind
from src.pf_common.errors import (
    AccountNotFoundError,
    InternalError,
    InvestmentNotFoundError,
    TransactionNotFoundError,
)
from src.pf_common.money import ZERO
from src.pf_investment.domain.models import (
    Investment,
    InvestmentFilter,
    InvestmentType,
    SipTransaction,
)
from src.pf_ledger.domain.models import LedgerEntry, Provenance
from src.pf_transaction.domain.models import Transaction, TransactionFilter

USER_ID = "00000000-0000-0000-0000-000000000001"
OTHER_USER_ID = "00000000-0000-0000-0000-000000000002"
DELETED_AT = datetime(2026, 1, 1, tzinfo=UTC)


def _new_id() -> str:
    return str(uuid.uuid4())


class _Store:
    # Set by FakeSession; excluded from snapshots.
    _session: "FakeSession | None" = None

    def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy({k: v for k, v in self.__dict__.items() if k != "_session"})

    def restore(self, state: dict[str, Any]) -> None:
        self.__dict__.update(copy.deepcopy(state))

    def _seeded(self) -> None:
        """Rows added by a test helper count as already committed."""
        if self._session is not None:
            self._session.checkpoint()


class FakeSession:
    def __init__(self, *stores: _Store) -> None:
        self._stores = stores
        self.commits = 0
        self.rollbacks = 0
        for store in stores:
            store._session = self
        self.checkpoint()

    def checkpoint(self) -> None:
        self._committed = [s.snapshot() for s in self._stores]

    async def commit(self) -> None:
        self.commits += 1
        self.checkpoint()

    async def rollback(self) -> None:
        self.rollbacks += 1
        for store, state in zip(self._stores, self._committed, strict=True):
            store.restore(state)


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


class FakeAccountRepository(_Store):
    def __init__(self) -> None:
        self.accounts: dict[str, Account] = {}
        self.details: dict[str, AccountDetails] = {}

    def add(
        self,
        balance: str = "0",
        account_type: AccountType = AccountType.CHECKING,
        user_id: str = USER_ID,
        available_credit: str | None = None,
        credit_limit: str | None = None,
    ) -> Account:
        account = Account(
            id=_new_id(),
            user_id=user_id,
            name=f"{account_type.value} account",
            type=account_type.value,
            currency="USD",
            balance=Decimal(balance),
        )
        self.accounts[account.id] = account
        if account_type in (AccountType.CREDIT_CARD, AccountType.LOAN):
            self.details[account.id] = AccountDetails(
                account_id=account.id,
                credit_limit=Decimal(credit_limit) if credit_limit else None,
                available_credit=Decimal(available_credit) if available_credit else None,
            )
        self._seeded()
        return copy.copy(account)

    def balance(self, account_id: str) -> Decimal:
        return self.accounts[account_id].balance

    def available_credit(self, account_id: str) -> Decimal | None:
        return self.details[account_id].available_credit

    async def create_account(
        self, db: Any, account: Account, details: AccountDetails | None
    ) -> Account:
        created = replace(account, id=_new_id())
        self.accounts[created.id] = created
        if details is not None:
            self.details[created.id] = replace(details, account_id=created.id)
        return copy.copy(created)

    async def get_account(
        self, db: Any, account_id: str, user_id: str, for_update: bool = False
    ) -> Account | None:
        account = self.accounts.get(account_id)
        if account is None or account.user_id != user_id:
            return None
        return copy.copy(account)

    async def get_details(self, db: Any, account_id: str) -> AccountDetails | None:
        details = self.details.get(account_id)
        return copy.copy(details) if details else None

    async def update_account(self, db: Any, account: Account) -> Account:
        stored = self.accounts.get(account.id)
        if stored is None:
            raise AccountNotFoundError(account.id)
        stored.name = account.name
        stored.currency = account.currency
        stored.institution_name = account.institution_name
        stored.is_active = account.is_active
        return copy.copy(stored)

    async def list_accounts(
        self, db: Any, user_id: str, account_type: str | None, is_active: bool | None
    ) -> list[Account]:
        return [
            copy.copy(a)
            for a in self.accounts.values()
            if a.user_id == user_id
            and (account_type is None or a.type == account_type)
            and (is_active is None or a.is_active == is_active)
        ]

    async def balance_summary(self, db: Any, user_id: str) -> dict[str, Decimal]:
        totals = {t.value: ZERO for t in AccountType}
        for a in self.accounts.values():
            if a.user_id == user_id and a.is_active:
                totals[a.type] += a.balance
        return totals

    async def apply_mutation(self, db: Any, mutation: BalanceMutation) -> Decimal:
        if mutation.field is BalanceField.AVAILABLE_CREDIT:
            details = self.details.get(mutation.account_id)
            if details is None:
                raise InternalError(f"Balance target missing for account {mutation.account_id}")
            details.available_credit = (details.available_credit or ZERO) + mutation.delta
            return details.available_credit
        account = self.accounts.get(mutation.account_id)
        if account is None:
            raise InternalError(f"Balance target missing for account {mutation.account_id}")
        account.balance += mutation.delta
        return account.balance


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


class FakeLedgerRepository(_Store):
    def __init__(self) -> None:
        self.entries: list[LedgerEntry] = []
        self.next_id = 1

    def for_provenance(self, provenance: Provenance) -> list[LedgerEntry]:
        return [e for e in self.entries if e.provenance == provenance]

    def total(self, account_id: str) -> Decimal:
        return sum((e.amount for e in self.entries if e.account_id == account_id), ZERO)

    async def append(
        self, db: Any, account_id: str, amount: Decimal, provenance: Provenance
    ) -> LedgerEntry:
        entry = LedgerEntry(id=self.next_id, account_id=account_id, amount=amount)
        setattr(entry, provenance.type.column, provenance.id)
        self.next_id += 1
        self.entries.append(entry)
        return copy.copy(entry)

    async def delete_by_provenance(self, db: Any, provenance: Provenance) -> int:
        before = len(self.entries)
        self.entries = [e for e in self.entries if e.provenance != provenance]
        return before - len(self.entries)

    async def list_for_account(
        self, db: Any, account_id: str, cursor_id: int | None, limit: int
    ) -> list[LedgerEntry]:
        rows = [
            e
            for e in sorted(self.entries, key=lambda e: e.id, reverse=True)
            if e.account_id == account_id and (cursor_id is None or e.id < cursor_id)
        ]
        return [copy.copy(e) for e in rows[:limit]]


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class FakeCategoryRepository(_Store):
    def __init__(self) -> None:
        self.categories: dict[str, Category] = {}

    def add(self, name: str, category_type: str, user_id: str | None = USER_ID) -> Category:
        category = Category(id=_new_id(), user_id=user_id, name=name, type=category_type)
        self.categories[category.id] = category
        self._seeded()
        return copy.copy(category)

    async def get_visible(self, db: Any, category_id: str, user_id: str) -> Category | None:
        c = self.categories.get(category_id)
        if c is None or c.user_id not in (user_id, None):
            return None
        return copy.copy(c)

    async def find_user_category_by_name(
        self, db: Any, user_id: str, name: str
    ) -> Category | None:
        for c in self.categories.values():
            if c.user_id == user_id and c.name == name:
                return copy.copy(c)
        return None

    async def find_user_category_by_type(
        self, db: Any, user_id: str, category_type: str
    ) -> Category | None:
        for c in self.categories.values():
            if c.user_id == user_id and c.type == category_type:
                return copy.copy(c)
        return None

    async def create(self, db: Any, category: Category) -> Category:
        created = replace(category, id=_new_id())
        self.categories[created.id] = created
        return copy.copy(created)

    async def seed_default(
        self, db: Any, name: str, category_type: str, description: str
    ) -> bool:
        if any(c.user_id is None and c.name == name for c in self.categories.values()):
            return False
        category = Category(id=_new_id(), user_id=None, name=name, type=category_type)
        self.categories[category.id] = category
        return True


# ---------------------------------------------------------------------------
# Expenses / incomes
# ---------------------------------------------------------------------------


class FakeTransactionRepository(_Store):
    def __init__(self) -> None:
        self.rows: dict[tuple[TransactionKind, str], Transaction] = {}

    async def insert(self, db: Any, txn: Transaction) -> Transaction:
        created = replace(txn, id=_new_id())
        self.rows[(created.kind, created.id)] = created
        return copy.copy(created)

    async def get(
        self,
        db: Any,
        kind: TransactionKind,
        transaction_id: str,
        user_id: str,
        for_update: bool = False,
    ) -> Transaction | None:
        txn = self.rows.get((kind, transaction_id))
        if txn is None or txn.user_id != user_id or txn.is_deleted:
            return None
        return copy.copy(txn)

    async def update(self, db: Any, txn: Transaction) -> Transaction:
        key = (txn.kind, txn.id)
        if key not in self.rows or self.rows[key].is_deleted:
            raise TransactionNotFoundError(txn.kind.value, txn.id)
        self.rows[key] = copy.copy(txn)
        return copy.copy(txn)

    async def soft_delete(self, db: Any, kind: TransactionKind, transaction_id: str) -> None:
        txn = self.rows.get((kind, transaction_id))
        if txn is None or txn.is_deleted:
            raise TransactionNotFoundError(kind.value, transaction_id)
        txn.deleted_at = DELETED_AT

    async def list_transactions(
        self,
        db: Any,
        kind: TransactionKind,
        user_id: str,
        filters: TransactionFilter,
        limit: int,
        offset: int,
    ) -> list[Transaction]:
        rows = [
            t
            for (k, _), t in self.rows.items()
            if k is kind
            and t.user_id == user_id
            and not t.is_deleted
            and (filters.account_id is None or t.account_id == filters.account_id)
            and (filters.category_id is None or t.category_id == filters.category_id)
            and (filters.start_date is None or t.transaction_date >= filters.start_date)
            and (filters.end_date is None or t.transaction_date <= filters.end_date)
        ]
        rows.sort(key=lambda t: t.transaction_date, reverse=True)
        return [copy.copy(t) for t in rows[offset:offset + limit]]


# ---------------------------------------------------------------------------
# Investments
# ---------------------------------------------------------------------------


class FakeInvestmentRepository(_Store):
    def __init__(self) -> None:
        self.types: dict[str, InvestmentType] = {}
        self.investments: dict[str, Investment] = {}
        self.sips: list[SipTransaction] = []

    def add_type(self, name: str = "mutual_funds") -> InvestmentType:
        t = InvestmentType(id=_new_id(), name=name)
        self.types[t.id] = t
        self._seeded()
        return t

    async def get_type(self, db: Any, type_id: str) -> InvestmentType | None:
        return self.types.get(type_id)

    async def list_types(self, db: Any) -> list[InvestmentType]:
        return sorted(self.types.values(), key=lambda t: t.name)

    async def insert(self, db: Any, investment: Investment) -> Investment:
        created = replace(investment, id=_new_id())
        self.investments[created.id] = created
        return copy.copy(created)

    async def get(
        self, db: Any, investment_id: str, user_id: str, for_update: bool = False
    ) -> Investment | None:
        inv = self.investments.get(investment_id)
        if inv is None or inv.user_id != user_id or inv.deleted_at is not None:
            return None
        result = copy.copy(inv)
        t = self.types.get(inv.investment_type_id)
        if not for_update and t is not None:
            result.investment_type_name = t.name
        return result

    async def update(self, db: Any, investment: Investment) -> Investment:
        if investment.id not in self.investments:
            raise InvestmentNotFoundError(investment.id)
        self.investments[investment.id] = copy.copy(investment)
        return copy.copy(investment)

    async def soft_delete(self, db: Any, investment_id: str) -> None:
        inv = self.investments.get(investment_id)
        if inv is None or inv.deleted_at is not None:
            raise InvestmentNotFoundError(investment_id)
        inv.deleted_at = DELETED_AT

    async def record_withdrawal(
        self, db: Any, investment_id: str, withdrawal_amount: Decimal, status: str
    ) -> Investment:
        inv = self.investments[investment_id]
        inv.withdrawal_amount = withdrawal_amount
        inv.status = status
        return copy.copy(inv)

    async def list_investments(
        self,
        db: Any,
        user_id: str,
        filters: InvestmentFilter,
        limit: int,
        offset: int,
    ) -> list[Investment]:
        rows = [
            i
            for i in self.investments.values()
            if i.user_id == user_id
            and i.deleted_at is None
            and (filters.status is None or i.status == filters.status)
            and (filters.is_sip is None or i.is_sip == filters.is_sip)
            and (filters.account_id is None or i.account_id == filters.account_id)
        ]
        return [copy.copy(i) for i in rows[offset:offset + limit]]

    async def sip_exists_for_date(
        self, db: Any, investment_id: str, transaction_date: date
    ) -> bool:
        return any(
            s.investment_id == investment_id and s.transaction_date == transaction_date
            for s in self.sips
        )

    async def insert_sip_transaction(self, db: Any, sip: SipTransaction) -> SipTransaction:
        created = replace(sip, id=_new_id())
        self.sips.append(created)
        return copy.copy(created)

    async def increment_installments(self, db: Any, investment_id: str) -> int:
        inv = self.investments[investment_id]
        inv.sip_installments_completed += 1
        return inv.sip_installments_completed

    async def list_sip_transactions(self, db: Any, investment_id: str) -> list[SipTransaction]:
        rows = [s for s in self.sips if s.investment_id == investment_id]
        rows.sort(key=lambda s: s.transaction_date, reverse=True)
        return [copy.copy(s) for s in rows]
