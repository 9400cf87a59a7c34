from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from family_finance.core.config import settings
from family_finance.db.session import get_db
from family_finance.models.account import Account
from family_finance.schemas.account import AccountCreate, AccountRead

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("", response_model=list[AccountRead])
def list_accounts(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
) -> list[AccountRead]:
    rows = db.execute(
        select(Account).order_by(Account.name).offset(skip).limit(limit)
    ).scalars().all()
    return [AccountRead.model_validate(r) for r in rows]


@router.post("", response_model=AccountRead, status_code=201)
def create_account(payload: AccountCreate, db: Session = Depends(get_db)) -> AccountRead:
    row = Account(
        name=payload.name.strip(),
        type=payload.type,
        description=(payload.description or "").strip() or None,
        base_currency=(payload.base_currency or settings.default_currency).upper(),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return AccountRead.model_validate(row)


@router.get("/{account_id}", response_model=AccountRead)
def get_account(
    account_id: UUID,
    db: Session = Depends(get_db),
) -> AccountRead:
    acc = db.get(Account, account_id)
    if not acc:
        raise HTTPException(status_code=404, detail="Account not found")
    return AccountRead.model_validate(acc)
