from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class BatchCreate(BaseModel):
    batch_number: str
    quantity: int
    expiry_date: Optional[date] = None
    buy_price: Optional[Decimal] = None
    purchase_date: Optional[date] = None
    lot_number: Optional[str] = None
    supplier_id: Optional[int] = None
    notes: Optional[str] = None


class BatchRead(BaseModel):
    id: int
    product_id: int
    batch_number: str
    lot_number: Optional[str] = None
    expiry_date: Optional[date] = None
    purchase_date: date
    initial_stock: int
    current_stock: int
    buy_price: Decimal
    supplier_id: Optional[int] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ProductBase(BaseModel):
    name: str
    category: str = "Uncategorized"
    category_id: Optional[int] = None
    buy_price: Decimal = Decimal("0")
    sell_price: Decimal = Decimal("0")
    discount_percent: Decimal = Decimal("0")
    reorder_level: int = 0
    description: Optional[str] = None
    brand: Optional[str] = None
    ean: Optional[str] = None
    scheme: Optional[str] = None


class ProductCreate(ProductBase):
    stock: int = 0
    is_batch_tracked: bool = False
    expiry_date: Optional[date] = None
    batches: List[BatchCreate] = Field(default_factory=list)


class ProductRead(ProductBase):
    id: int
    stock: int
    is_batch_tracked: bool
    expiry_date: Optional[date] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductReadWithBatches(ProductRead):
    batches: List[BatchRead] = Field(default_factory=list)


class EnableBatchTracking(BaseModel):
    batches: List[BatchCreate]


class StockAdjustment(BaseModel):
    delta: int
    batch_id: Optional[int] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    category_id: Optional[int] = None
    buy_price: Optional[Decimal] = None
    sell_price: Optional[Decimal] = None
    discount_percent: Optional[Decimal] = None
    reorder_level: Optional[int] = None
    expiry_date: Optional[date] = None
    description: Optional[str] = None
    brand: Optional[str] = None
    ean: Optional[str] = None
    scheme: Optional[str] = None
