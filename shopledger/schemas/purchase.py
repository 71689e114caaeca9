from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PurchaseItemCreate(BaseModel):
    product_id: int
    quantity: int
    buy_price: Decimal
    total: Optional[Decimal] = None
    name: str = ""
    # Required for batch-tracked products.
    batch_number: Optional[str] = None
    expiry_date: Optional[date] = None


class PurchaseCreate(BaseModel):
    items: List[PurchaseItemCreate]
    grand_total: Decimal
    paid_amount: Decimal = Decimal("0")
    supplier_id: Optional[int] = None
    date: Optional[datetime] = None
    notes: Optional[str] = None


class PurchaseItemRead(BaseModel):
    id: int
    product_id: int
    batch_id: Optional[int] = None
    name: str
    quantity: int
    buy_price: Decimal
    total: Decimal
    batch_number: Optional[str] = None
    expiry_date: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)


class PurchaseRead(BaseModel):
    id: int
    date: datetime
    supplier_id: Optional[int] = None
    grand_total: Decimal
    paid_amount: Decimal
    due_amount: Decimal
    notes: Optional[str] = None
    items: List[PurchaseItemRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
