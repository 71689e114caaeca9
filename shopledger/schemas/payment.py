from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class PaymentCreate(BaseModel):
    customer_id: Optional[int] = None
    amount: Decimal
    type: str = "received"
    date: Optional[datetime] = None
    notes: Optional[str] = None


class SupplierPaymentCreate(BaseModel):
    supplier_id: Optional[int] = None
    amount: Decimal
    type: str = "paid"
    date: Optional[datetime] = None
    notes: Optional[str] = None
    purchase_id: Optional[int] = None


class PaymentRead(BaseModel):
    id: int
    customer_id: int
    amount: Decimal
    type: str
    date: datetime
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class SupplierPaymentRead(BaseModel):
    id: int
    supplier_id: int
    purchase_id: Optional[int] = None
    amount: Decimal
    type: str
    date: datetime
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
