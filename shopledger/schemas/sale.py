from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SaleItemCreate(BaseModel):
    product_id: int
    quantity: int
    price: Decimal
    batch_id: Optional[int] = None
    item_discount: Decimal = Decimal("0")
    name: str = ""
    scheme: Optional[str] = None


class SaleCreate(BaseModel):
    items: List[SaleItemCreate]
    subtotal: Decimal
    total: Decimal
    discount: Decimal = Decimal("0")
    tax: Optional[Decimal] = None
    date: Optional[datetime] = None
    customer_id: Optional[int] = None
    payment_type: Optional[str] = None
    due_amount: Optional[Decimal] = None


class SaleItemRead(BaseModel):
    id: int
    product_id: int
    batch_id: Optional[int] = None
    name: str
    quantity: int
    price: Decimal
    item_discount: Decimal
    scheme: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class SaleRead(BaseModel):
    id: int
    date: datetime
    subtotal: Decimal
    discount: Decimal
    tax: Optional[Decimal] = None
    total: Decimal
    customer_id: Optional[int] = None
    payment_type: Optional[str] = None
    due_amount: Decimal
    items: List[SaleItemRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
