from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict


class CategoryCreate(BaseModel):
    name: str
    parent_id: Optional[int] = None
    description: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    parent_id: Optional[int] = None
    description: Optional[str] = None


class CategoryRead(CategoryCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)


class ExpenseCreate(BaseModel):
    category: str
    amount: Decimal
    payment_method: str = "cash"
    description: Optional[str] = None
    date: Optional[datetime] = None


class ExpenseUpdate(BaseModel):
    category: Optional[str] = None
    amount: Optional[Decimal] = None
    payment_method: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None


class ExpenseRead(BaseModel):
    id: int
    date: datetime
    category: str
    amount: Decimal
    description: Optional[str] = None
    payment_method: str

    model_config = ConfigDict(from_attributes=True)
