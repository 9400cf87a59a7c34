from __future__ import annotations

import csv
import io
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from openpyxl import Workbook
from sqlalchemy.orm import Session

from family_finance.api.deps import get_today
from family_finance.db.session import get_db
from family_finance.services import budget_repository as repo
from family_finance.services.budgeting.progress import evaluate
from family_finance.utils.currency import round_currency
from family_finance.utils.dates import to_iso_date

router = APIRouter(prefix="/exports", tags=["exports"])

BUDGET_COLUMNS = [
    "budget_id", "name", "category", "period", "start_date", "end_date",
    "amount", "spent", "remaining", "percent_spent", "status",
]


def _rows(db: Session, today: date, account_id: UUID | None) -> list[list[str]]:
    rows: list[list[str]] = []
    for b in repo.list_budgets(db, account_id):
        p = evaluate(b.amount, b.spent, b.end_date, today)
        rows.append([
            str(b.id),
            b.name,
            b.category,
            b.period.value,
            to_iso_date(b.start_date),
            to_iso_date(b.end_date),
            f"{b.amount:.2f}",
            f"{b.spent:.2f}",
            f"{round_currency(p.remaining):.2f}",
            f"{p.percent_spent:.0f}",
            p.status_tier.value,
        ])
    return rows


@router.get("/budgets.csv")
def export_budgets_csv(
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
    account_id: UUID | None = Query(None),
) -> Response:
    out = io.StringIO()
    w = csv.writer(out)
    w.writerow(BUDGET_COLUMNS)
    for r in _rows(db, today, account_id):
        w.writerow(r)
    headers = {"Content-Disposition": f'attachment; filename="budgets-{today.isoformat()}.csv"'}
    return Response(content=out.getvalue().encode("utf-8"), media_type="text/csv", headers=headers)


@router.get("/budgets.xlsx")
def export_budgets_xlsx(
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
    account_id: UUID | None = Query(None),
) -> Response:
    wb = Workbook()
    ws = wb.active
    ws.title = "Budgets"
    ws.append(BUDGET_COLUMNS)
    for r in _rows(db, today, account_id):
        ws.append(r)
    bio = io.BytesIO()
    wb.save(bio)
    headers = {"Content-Disposition": f'attachment; filename="budgets-{today.isoformat()}.xlsx"'}
    return Response(
        content=bio.getvalue(),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers=headers,
    )
