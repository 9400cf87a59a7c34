from __future__ import annotations

import unittest
from datetime import date
from unittest import mock

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from family_finance.api.deps import get_today
from family_finance.db.base import Base
from family_finance.db.session import get_db
from family_finance.main import app
from family_finance.services.notifications import NotificationCenter, get_notification_center

TODAY = date(2024, 6, 15)

engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSession = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def _get_test_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


class BudgetApiTests(unittest.TestCase):
    def setUp(self):
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
        self.notifications = NotificationCenter()
        app.dependency_overrides[get_db] = _get_test_db
        app.dependency_overrides[get_today] = lambda: TODAY
        app.dependency_overrides[get_notification_center] = lambda: self.notifications
        self.client = TestClient(app)
        r = self.client.post("/accounts", json={"name": "Home", "type": "family"})
        self.assertEqual(r.status_code, 201)
        self.account_id = r.json()["id"]

    def tearDown(self):
        app.dependency_overrides.clear()

    def _budget(self, **overrides) -> dict:
        body = {
            "account_id": self.account_id,
            "name": "Groceries",
            "amount": "500",
            "category": "Food",
            "period": "monthly",
            "start_date": "2024-06-01",
        }
        body.update(overrides)
        r = self.client.post("/budgets", json=body)
        self.assertEqual(r.status_code, 201, r.text)
        return r.json()

    def _expense(self, amount, category="Food", day="2024-06-10"):
        r = self.client.post(
            "/expenses",
            json={
                "account_id": self.account_id,
                "amount": amount,
                "category": category,
                "description": "shop",
                "date": day,
            },
        )
        self.assertEqual(r.status_code, 201, r.text)

    def test_create_derives_end_date_and_notifies(self):
        data = self._budget()
        self.assertEqual(data["budget"]["end_date"], "2024-07-01")
        self.assertEqual(data["budget"]["spent"], 0)
        self.assertEqual(data["progress"]["status_tier"], "on-track")
        self.assertEqual(self.client.get("/accounts").json()[0]["base_currency"], "USD")
        messages = [(n.kind.value, n.message) for n in self.notifications.active()]
        self.assertEqual(messages, [("success", "Budget created successfully")])

    def test_create_rejects_invalid_form_per_field(self):
        r = self.client.post(
            "/budgets",
            json={
                "account_id": self.account_id,
                "name": "",
                "amount": "0",
                "period": "custom",
                "start_date": "2024-06-01",
            },
        )
        self.assertEqual(r.status_code, 422)
        self.assertEqual(
            r.json()["errors"],
            {
                "name": "Budget name is required",
                "amount": "Budget amount must be a positive number",
                "end_date": "End date is required",
            },
        )
        self.assertEqual(self.notifications.active(), [])

    def test_non_string_period_is_rejected(self):
        r = self.client.post(
            "/budgets",
            json={"account_id": self.account_id, "name": "Rent", "amount": 900, "period": 5},
        )
        self.assertEqual(r.status_code, 422)
        self.assertEqual(self.notifications.active(), [])

    def test_unknown_account(self):
        r = self.client.post(
            "/budgets",
            json={"account_id": "00000000-0000-0000-0000-000000000000", "name": "x", "amount": 10},
        )
        self.assertEqual(r.status_code, 404)

    def test_spent_matches_window_and_category(self):
        food = self._budget()
        everything = self._budget(name="Everything", amount=1000, category="all")
        self._expense(300)
        self._expense(150, category="Fuel")
        self._expense(99, day="2024-07-02")
        r = self.client.get(f"/budgets/{food['budget']['id']}")
        self.assertEqual(r.status_code, 200)
        detail = r.json()
        self.assertEqual(detail["budget"]["spent"], 300)
        self.assertEqual(detail["progress"]["percent_spent"], 60)
        self.assertEqual(detail["badge_label"], "Under Budget")
        self.assertEqual(detail["days_remaining"], 16)
        self.assertEqual(len(detail["expenses"]), 1)
        r = self.client.get(f"/budgets/{everything['budget']['id']}")
        self.assertEqual(r.json()["budget"]["spent"], 450)

    def test_summary_counts_active_budgets_only(self):
        self._budget(name="Active", amount=500)
        self._budget(name="Expired", amount=200, category="Travel", start_date="2024-05-01", end_date="2024-06-01", period="custom")
        self._expense(600)
        self._expense(50, category="Travel", day="2024-05-20")
        r = self.client.get("/budgets/summary", params={"account_id": self.account_id})
        self.assertEqual(r.status_code, 200)
        s = r.json()
        self.assertEqual((s["total_budgeted"], s["total_spent"], s["over_budget_count"]), (500, 600, 1))
        self.assertEqual(s["total_spent_display"], "$600")
        self.assertEqual([b["budget"]["name"] for b in s["top"]], ["Active"])
        self.assertEqual(s["top"][0]["progress"]["warning"], "Over budget")
        self.assertEqual(s["more_count"], 0)

    def test_list_tabs(self):
        self._budget(name="Current")
        self._budget(name="Done", start_date="2024-01-01", period="weekly")
        def names(tab):
            return [b["budget"]["name"] for b in self.client.get("/budgets", params={"tab": tab}).json()]

        self.assertEqual(names("active"), ["Current"])
        self.assertEqual(names("completed"), ["Done"])
        self.assertEqual(names("all"), ["Current", "Done"])

    def test_overview_ranks_by_usage(self):
        self._budget(name="Low", amount=1000)
        self._budget(name="High", amount=100, category="Fuel")
        self._expense(120, category="Fuel")
        self._expense(100)
        rows = self.client.get("/budgets/overview").json()["rows"]
        self.assertEqual([r["name"] for r in rows], ["High", "Low"])
        self.assertTrue(rows[0]["is_over_budget"])
        self.assertEqual(rows[0]["percent_used"], 100)

    def test_update_is_full_form_edit(self):
        created = self._budget()
        budget_id = created["budget"]["id"]
        r = self.client.put(
            f"/budgets/{budget_id}",
            json={
                "account_id": self.account_id,
                "name": "Food & Dining",
                "amount": "650",
                "category": "Food",
                "period": "quarterly",
                "start_date": "2024-06-01",
                "end_date": "2024-07-01",
            },
        )
        self.assertEqual(r.status_code, 200, r.text)
        body = r.json()["budget"]
        self.assertEqual(body["name"], "Food & Dining")
        self.assertEqual(body["period"], "quarterly")
        # Edits never re-derive the end date.
        self.assertEqual(body["end_date"], "2024-07-01")
        self.assertEqual(self.notifications.active()[-1].message, "Budget updated successfully")

    def test_update_unknown_budget(self):
        r = self.client.put(
            "/budgets/00000000-0000-0000-0000-000000000000",
            json={
                "account_id": self.account_id,
                "name": "x",
                "amount": 5,
                "start_date": "2024-06-01",
                "end_date": "2024-07-01",
            },
        )
        self.assertEqual(r.status_code, 404)

    def test_delete(self):
        budget_id = self._budget()["budget"]["id"]
        self.assertEqual(self.client.delete(f"/budgets/{budget_id}").status_code, 204)
        self.assertEqual(self.client.get(f"/budgets/{budget_id}").status_code, 404)
        self.assertEqual(self.notifications.active()[-1].message, "Budget deleted successfully")

    def test_persistence_failure_is_one_generic_notification(self):
        with mock.patch(
            "family_finance.services.budget_repository.save_budget",
            side_effect=SQLAlchemyError("connection lost"),
        ):
            r = self.client.post(
                "/budgets",
                json={"account_id": self.account_id, "name": "Rent", "amount": 900},
            )
        self.assertEqual(r.status_code, 500)
        messages = [(n.kind.value, n.message) for n in self.notifications.active()]
        self.assertEqual(messages, [("error", "Failed to create budget")])

    def test_period_end_preview(self):
        r = self.client.get(
            "/budgets/period-end",
            params={"period": "custom", "start_date": "2024-01-15", "end_date": "2024-02-15"},
        )
        self.assertEqual(r.json()["end_date"], "2024-02-15")
        r = self.client.get("/budgets/period-end", params={"period": "monthly", "start_date": "2024-01-31"})
        self.assertEqual(r.json()["end_date"], "2024-03-02")

    def test_budget_alerts_without_delivery(self):
        self._budget(name="Near", amount=100)
        self._budget(name="Fine", amount=1000, category="Fuel")
        self._expense(92)
        r = self.client.post("/notifications/check", params={"deliver": "false"})
        self.assertEqual(r.status_code, 200)
        items = r.json()["items"]
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0]["title"], "Near")
        self.assertEqual(items[0]["level"], "warning")
        self.assertEqual(items[0]["message"], "Near limit: $92.00 of $100.00 spent")
        self.assertEqual(r.json()["delivered"], [])

    def test_notifications_dismiss_and_clear(self):
        self._budget()
        listing = self.client.get("/notifications").json()
        self.assertEqual(listing["ttl_seconds"], 5)
        note_id = listing["items"][0]["id"]
        self.assertEqual(self.client.post(f"/notifications/{note_id}/dismiss").status_code, 204)
        self.assertEqual(self.client.get("/notifications").json()["items"], [])
        self.assertEqual(self.client.post("/notifications/missing/dismiss").status_code, 404)
        self.assertEqual(self.client.delete("/notifications").status_code, 204)

    def test_monthly_spending(self):
        self._expense(100, day="2024-05-20")
        self._expense(150, day="2024-06-02")
        body = self.client.get("/expenses/monthly").json()
        self.assertEqual((body["last_month"], body["this_month"], body["percentage_change"]), (100, 150, 50))

    def test_update_expense_moves_budget_spend(self):
        budget_id = self._budget()["budget"]["id"]
        r = self.client.post(
            "/expenses",
            json={"account_id": self.account_id, "amount": 80, "category": "Food", "description": "market", "date": "2024-06-05"},
        )
        expense_id = r.json()["id"]
        r = self.client.put(
            f"/expenses/{expense_id}",
            json={"account_id": self.account_id, "amount": 45.5, "category": "Fuel", "description": " petrol ", "date": "2024-06-06"},
        )
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual((r.json()["category"], r.json()["description"], r.json()["amount"]), ("Fuel", "petrol", 45.5))
        self.assertEqual(self.client.get(f"/budgets/{budget_id}").json()["budget"]["spent"], 0)
        missing = self.client.put(
            "/expenses/00000000-0000-0000-0000-000000000000",
            json={"account_id": self.account_id, "amount": 1, "category": "Food", "description": "x", "date": "2024-06-06"},
        )
        self.assertEqual(missing.status_code, 404)

    def test_spending_by_category(self):
        self._expense(30)
        self._expense(20.25)
        self._expense(75, category="Fuel")
        self._expense(500, category="Rent", day="2024-05-01")
        rows = self.client.get("/expenses/by-category", params={"from_date": "2024-06-01"}).json()
        self.assertEqual(
            [(r["category"], r["total"], r["count"]) for r in rows],
            [("Fuel", 75, 1), ("Food", 50.25, 2)],
        )

    def test_spending_by_month(self):
        self._expense(10, day="2023-12-31")
        self._expense(20, day="2024-05-03")
        self._expense(5, day="2024-05-28")
        self._expense(40, day="2024-06-10")
        rows = self.client.get("/expenses/by-month", params={"account_id": self.account_id}).json()
        self.assertEqual(
            [(r["month"], r["total"], r["count"]) for r in rows],
            [("2023-12", 10, 1), ("2024-05", 25, 2), ("2024-06", 40, 1)],
        )

    def test_request_log_carries_account(self):
        with self.assertLogs("family_finance.request", level="INFO") as logs:
            r = self.client.get("/budgets", params={"account_id": self.account_id}, headers={"x-request-id": "req-42"})
        self.assertEqual(r.headers["x-request-id"], "req-42")
        self.assertIn(f"id=req-42 GET /budgets account={self.account_id} status=200", logs.output[-1])

    def test_export_csv(self):
        self._budget()
        r = self.client.get("/exports/budgets.csv")
        self.assertEqual(r.status_code, 200)
        lines = r.text.strip().splitlines()
        self.assertTrue(lines[0].startswith("budget_id,name,category,period"))
        self.assertTrue(lines[1].endswith(",0,on-track"))


if __name__ == "__main__":
    unittest.main()
