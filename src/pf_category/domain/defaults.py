"""Shared default categories, inserted once at startup with user_id NULL."""

from src.pf_common.enums import CategoryType

# (name, type, description)
DEFAULT_CATEGORIES: list[tuple[str, CategoryType, str]] = [
    ("Food", CategoryType.EXPENSE, "Food and dining expenses"),
    ("Shopping", CategoryType.EXPENSE, "Shopping expenses"),
    ("Bill", CategoryType.EXPENSE, "Bill payments"),
    ("Credit Card", CategoryType.EXPENSE, "Credit card payments"),
    ("Loan", CategoryType.EXPENSE, "Loan payments"),
    ("Salary", CategoryType.INCOME, "Salary and wages"),
    ("Investment", CategoryType.INCOME, "Investment income"),
]

# Category created for a user on their first withdrawal if they have no income category.
WITHDRAWAL_CATEGORY_NAME = "Investment"
WITHDRAWAL_CATEGORY_DESCRIPTION = "Investment income"
