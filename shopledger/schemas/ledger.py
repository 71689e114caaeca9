from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LedgerEntryRead(BaseModel):
    kind: str
    ref_id: int
    date: datetime
    description: str
    debit: Decimal
    credit: Decimal
    balance: Decimal

    model_config = ConfigDict(from_attributes=True)


class PartyLedgerRead(BaseModel):
    party_type: str
    party_id: int
    name: str
    opening_balance: Decimal
    current_balance: Decimal
    computed_balance: Decimal
    entries: List[LedgerEntryRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class DriftRead(BaseModel):
    kind: str
    entity_id: int
    stored: Decimal
    expected: Decimal
    fixed: bool = False
    detail: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
