"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth
  2xxx: Account
  3xxx: Category
  4xxx: Expense / Income
  5xxx: Investment
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired token", 401)


# --- 2xxx: Account ---

class AccountNotFoundError(AppError):
    def __init__(self, account_id: str) -> None:
        super().__init__(2001, f"Account not found: {account_id}", 404)


# --- 3xxx: Category ---

class CategoryNotFoundError(AppError):
    def __init__(self, category_id: str) -> None:
        super().__init__(3001, f"Category not found: {category_id}", 404)


# --- 4xxx: Expense / Income ---

class ValidationError(AppError):
    """Malformed or out-of-range input. Always raised before any write."""

    def __init__(self, detail: str) -> None:
        super().__init__(4001, f"Validation failed: {detail}", 422)


class TransactionNotFoundError(AppError):
    def __init__(self, kind: str, transaction_id: str) -> None:
        super().__init__(4002, f"{kind.capitalize()} not found: {transaction_id}", 404)


# --- 5xxx: Investment ---

class InvestmentNotFoundError(AppError):
    def __init__(self, investment_id: str) -> None:
        super().__init__(5001, f"Investment not found: {investment_id}", 404)


class InvestmentTypeNotFoundError(AppError):
    def __init__(self, type_id: str) -> None:
        super().__init__(5002, f"Investment type not found: {type_id}", 404)


class InvalidStateError(AppError):
    def __init__(self, investment_id: str, status: str) -> None:
        super().__init__(
            5003, f"Investment {investment_id} in status {status} is not active", 409
        )


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class TransactionTimeoutError(AppError):
    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(
            9003, f"Operation rolled back after exceeding {timeout_seconds}s", 503
        )


class ConflictError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9004, f"Conflict: {detail}", 409)
