from __future__ import annotations

import unittest
import uuid
from datetime import date

from family_finance.core.errors import (
    BudgetFormError,
    InvalidBudgetAmount,
    InvalidDateRange,
    MissingRequiredField,
)
from family_finance.schemas.budget import BudgetFormInput
from family_finance.services.budgeting.forms import clean_budget_form, validate_budget_form
from family_finance.services.budgeting.period import PeriodKind

TODAY = date(2026, 10, 18)
ACCOUNT_ID = uuid.uuid4()


def _form(**overrides) -> BudgetFormInput:
    data = {
        "account_id": ACCOUNT_ID,
        "name": "Groceries",
        "amount": "400",
        "period": "monthly",
    }
    data.update(overrides)
    return BudgetFormInput(**data)


class CleanBudgetFormTests(unittest.TestCase):
    def test_create_defaults_dates(self):
        out = clean_budget_form(_form(), TODAY)
        self.assertEqual(out.start_date, TODAY)
        self.assertEqual(out.end_date, date(2026, 11, 18))
        self.assertEqual(out.category, "All")
        self.assertEqual(out.amount, 400.0)

    def test_normalizes_fields(self):
        out = clean_budget_form(
            _form(name="  Dining  ", amount="$1,250.5", category="Food", notes="   ", period="Weekly"),
            TODAY,
        )
        self.assertEqual(out.name, "Dining")
        self.assertEqual(out.amount, 1250.5)
        self.assertEqual(out.category, "Food")
        self.assertIsNone(out.notes)
        self.assertIs(out.period, PeriodKind.WEEKLY)

    def test_iso_timestamps_are_accepted(self):
        out = clean_budget_form(
            _form(start_date="2024-01-15T00:00:00.000Z", end_date="2024-03-01"),
            TODAY,
        )
        self.assertEqual(out.start_date, date(2024, 1, 15))
        self.assertEqual(out.end_date, date(2024, 3, 1))

    def test_custom_period_requires_end_date(self):
        with self.assertRaises(BudgetFormError) as ctx:
            clean_budget_form(_form(period="custom"), TODAY)
        err = ctx.exception.errors["end_date"]
        self.assertIsInstance(err, MissingRequiredField)
        self.assertEqual(err.message, "End date is required")

    def test_end_must_follow_start(self):
        with self.assertRaises(BudgetFormError) as ctx:
            clean_budget_form(_form(start_date="2024-02-01", end_date="2024-02-01"), TODAY)
        self.assertIsInstance(ctx.exception.errors["end_date"], InvalidDateRange)

    def test_edit_mode_does_not_fill_dates(self):
        with self.assertRaises(BudgetFormError) as ctx:
            clean_budget_form(_form(), TODAY, edit_mode=True)
        self.assertEqual(set(ctx.exception.errors), {"start_date", "end_date"})

    def test_all_errors_collected(self):
        with self.assertRaises(BudgetFormError) as ctx:
            clean_budget_form(_form(name=" ", amount="-5", period="custom"), TODAY)
        errors = ctx.exception.errors
        self.assertIsInstance(errors["name"], MissingRequiredField)
        self.assertIsInstance(errors["amount"], InvalidBudgetAmount)
        self.assertIn("end_date", errors)
        self.assertEqual(ctx.exception.messages()["amount"], "Budget amount must be a positive number")


class ValidateBudgetFormTests(unittest.TestCase):
    def test_valid_form_has_no_errors(self):
        form = _form(start_date="2024-01-01", end_date="2024-02-01")
        self.assertEqual(validate_budget_form(form), {})

    def test_non_numeric_and_blank_amounts(self):
        for raw in ("", "abc", None):
            with self.subTest(raw=raw):
                errors = validate_budget_form(_form(amount=raw, start_date="2024-01-01", end_date="2024-02-01"))
                self.assertEqual(errors, {"amount": "Budget amount must be a positive number"})

    def test_reports_as_submitted(self):
        errors = validate_budget_form(_form(name=""))
        self.assertEqual(
            errors,
            {
                "name": "Budget name is required",
                "start_date": "Start date is required",
                "end_date": "End date is required",
            },
        )


if __name__ == "__main__":
    unittest.main()
