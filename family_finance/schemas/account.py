from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from family_finance.models.account import AccountType


class AccountCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    type: AccountType = AccountType.PERSONAL
    description: str | None = None
    base_currency: str | None = Field(default=None, pattern=r"^[A-Za-z]{3}$")


class AccountRead(BaseModel):
    id: UUID
    name: str
    type: AccountType
    description: str | None
    base_currency: str
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
