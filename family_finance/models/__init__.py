from family_finance.models.account import Account, AccountType
from family_finance.models.budget import ALL_CATEGORIES, Budget
from family_finance.models.expense import Expense

__all__ = [
    "ALL_CATEGORIES",
    "Account",
    "AccountType",
    "Budget",
    "Expense",
]
