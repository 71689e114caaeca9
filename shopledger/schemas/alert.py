from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict


class StockAlertRead(BaseModel):
    type: str
    product_id: int
    product_name: str
    message: str
    stock: int
    batch_id: Optional[int] = None
    batch_number: Optional[str] = None
    expiry_date: Optional[date] = None
    days_to_expiry: Optional[int] = None
    expired: bool = False

    model_config = ConfigDict(from_attributes=True)
