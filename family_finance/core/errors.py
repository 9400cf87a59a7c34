"""
Budget validation errors.

All of these are raised at the form boundary and are recoverable by the caller.
The period and progress functions only ever raise ``InvalidBudgetAmount``.
"""
from __future__ import annotations


class BudgetError(ValueError):
    """Base class for budget input errors; ``field`` names the offending form field."""

    field: str = "form"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        if field is not None:
            self.field = field


class InvalidBudgetAmount(BudgetError):
    field = "amount"


class InvalidDateRange(BudgetError):
    field = "end_date"


class MissingRequiredField(BudgetError):
    pass


class BudgetFormError(BudgetError):
    """Raised once per submission with every per-field error collected."""

    def __init__(self, errors: dict[str, BudgetError]):
        self.errors = errors
        fields = ", ".join(sorted(errors))
        super().__init__(f"Invalid budget form: {fields}")

    def messages(self) -> dict[str, str]:
        return {name: err.message for name, err in self.errors.items()}
