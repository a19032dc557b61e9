"""Account kinds — the closed set of routing rules for balance mutations.

Call sites never branch on account type. They ask the account's kind for a
debit or a credit and get back a BalanceMutation naming the field to change:

  kind          apply_debit (expense, purchase, SIP)   apply_credit (income, withdrawal)
  standard      balance  -= amount                      balance          += amount
  credit_card   balance  -= amount                      available_credit += amount
  loan          balance  -= amount                      balance          += amount

Debits land on `balance` for every kind, credit cards included. Loans keep
`loan_balance` in AccountDetails as a separate figure that no posting touches.
"""

from decimal import Decimal
from typing import Protocol

from src.pf_account.domain.models import BalanceMutation
from src.pf_common.enums import AccountType, BalanceField


class AccountKind(Protocol):
    name: str

    def apply_debit(self, account_id: str, amount: Decimal) -> BalanceMutation: ...

    def apply_credit(self, account_id: str, amount: Decimal) -> BalanceMutation: ...


class StandardKind:
    name = "standard"

    def apply_debit(self, account_id: str, amount: Decimal) -> BalanceMutation:
        return BalanceMutation(account_id, BalanceField.BALANCE, -amount)

    def apply_credit(self, account_id: str, amount: Decimal) -> BalanceMutation:
        return BalanceMutation(account_id, BalanceField.BALANCE, amount)


class CreditCardKind(StandardKind):
    name = "credit_card"

    def apply_credit(self, account_id: str, amount: Decimal) -> BalanceMutation:
        return BalanceMutation(account_id, BalanceField.AVAILABLE_CREDIT, amount)


class LoanKind(StandardKind):
    name = "loan"


_STANDARD = StandardKind()
_KINDS: dict[str, AccountKind] = {
    AccountType.CREDIT_CARD.value: CreditCardKind(),
    AccountType.LOAN.value: LoanKind(),
}


def kind_for(account_type: str) -> AccountKind:
    """Resolve the routing kind for an account type (unknown types are standard)."""
    return _KINDS.get(account_type, _STANDARD)


def requires_details(account_type: str) -> bool:
    return account_type in _KINDS
