"""
Budget form validation.

Errors are collected per field and raised together as ``BudgetFormError``;
they never reach the period or progress functions.
"""
from __future__ import annotations

from datetime import date

from family_finance.core.errors import (
    BudgetError,
    BudgetFormError,
    InvalidBudgetAmount,
    InvalidDateRange,
    MissingRequiredField,
)
from family_finance.models.budget import ALL_CATEGORIES
from family_finance.schemas.budget import BudgetFormInput, BudgetWrite
from family_finance.services.budgeting.period import default_budget_dates
from family_finance.utils.currency import parse_amount_input, round_currency

AMOUNT_MESSAGE = "Budget amount must be a positive number"


def _check_amount(raw: str | float | None) -> tuple[float | None, BudgetError | None]:
    amount = parse_amount_input(raw)
    if amount is None:
        return None, MissingRequiredField(AMOUNT_MESSAGE, "amount")
    amount = round_currency(amount)
    if amount <= 0:
        return None, InvalidBudgetAmount(AMOUNT_MESSAGE)
    return amount, None


def collect_errors(
    name: str,
    amount_raw: str | float | None,
    start_date: date | None,
    end_date: date | None,
) -> dict[str, BudgetError]:
    errors: dict[str, BudgetError] = {}
    if not (name or "").strip():
        errors["name"] = MissingRequiredField("Budget name is required", "name")
    _, amount_error = _check_amount(amount_raw)
    if amount_error is not None:
        errors["amount"] = amount_error
    if start_date is None:
        errors["start_date"] = MissingRequiredField("Start date is required", "start_date")
    if end_date is None:
        errors["end_date"] = MissingRequiredField("End date is required", "end_date")
    elif start_date is not None and end_date <= start_date:
        errors["end_date"] = InvalidDateRange("End date must be after start date")
    return errors


def validate_budget_form(form: BudgetFormInput) -> dict[str, str]:
    """Per-field messages for the form exactly as submitted; empty when valid."""
    errors = collect_errors(form.name, form.amount, form.start_date, form.end_date)
    return {k: e.message for k, e in errors.items()}


def normalize_category(category: str | None) -> str:
    value = (category or "").strip()
    if not value or value.lower() == ALL_CATEGORIES.lower():
        return ALL_CATEGORIES
    return value


def clean_budget_form(form: BudgetFormInput, today: date, *, edit_mode: bool = False) -> BudgetWrite:
    """
    Apply create-time defaults, validate, and normalize a submitted form.

    On create the start date defaults to ``today`` and a missing end date is
    derived from the period. Edits are validated as submitted.
    """
    start_date, end_date = form.start_date, form.end_date
    if not edit_mode:
        dates = default_budget_dates(today, form.period, start_date, end_date)
        start_date, end_date = dates.start_date, dates.end_date

    errors = collect_errors(form.name, form.amount, start_date, end_date)
    if errors:
        raise BudgetFormError(errors)

    amount, _ = _check_amount(form.amount)
    notes = (form.notes or "").strip() or None
    return BudgetWrite(
        account_id=form.account_id,
        name=form.name.strip(),
        amount=amount,
        category=normalize_category(form.category),
        period=form.period,
        start_date=start_date,
        end_date=end_date,
        notes=notes,
    )
