"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class AccountType(str, Enum):
    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT_CARD = "credit_card"
    CASH = "cash"
    INVESTMENT = "investment"
    LOAN = "loan"


class BalanceField(str, Enum):
    """Which stored figure a balance mutation lands on."""
    BALANCE = "balance"
    AVAILABLE_CREDIT = "available_credit"


class TransactionKind(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"


class CategoryType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class InvestmentStatus(str, Enum):
    ACTIVE = "active"
    SOLD = "sold"
    WITHDRAWN = "withdrawn"


class SipFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class SipTransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
