from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shopledger.dependencies import get_db
from shopledger.schemas.report import SalesSummaryRead
from shopledger.services.report_service import sales_summary

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/sales-summary", response_model=SalesSummaryRead)
def read_sales_summary(
    today: Optional[date] = Query(None, description="Reference date, defaults to today (UTC)"),
    db: Session = Depends(get_db),
):
    summary = sales_summary(db, today=today)
    return SalesSummaryRead.model_validate(summary, from_attributes=True)


__all__ = ["router"]
