from datetime import date
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict


class DailySalesRead(BaseModel):
    day: date
    total: Decimal
    count: int

    model_config = ConfigDict(from_attributes=True)


class TopProductRead(BaseModel):
    product_id: int
    name: str
    quantity: int
    revenue: Decimal

    model_config = ConfigDict(from_attributes=True)


class SalesSummaryRead(BaseModel):
    today: date
    today_total: Decimal
    today_count: int
    month_total: Decimal
    month_count: int
    trend: List[DailySalesRead]
    top_products: List[TopProductRead]

    model_config = ConfigDict(from_attributes=True)
