from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class PartyCreate(BaseModel):
    name: str
    phone: str = ""
    address: Optional[str] = None
    notes: Optional[str] = None
    opening_balance: Decimal = Decimal("0")


class CustomerCreate(PartyCreate):
    pass


class SupplierCreate(PartyCreate):
    pass


class PartyRead(BaseModel):
    id: int
    name: str
    phone: str
    address: Optional[str] = None
    notes: Optional[str] = None
    current_balance: Decimal
    opening_balance: Decimal
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PartyUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
