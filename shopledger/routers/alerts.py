from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shopledger.dependencies import get_db
from shopledger.schemas.alert import StockAlertRead
from shopledger.services.alert_service import scan_stock_alerts

router = APIRouter(prefix="/alerts", tags=["Alerts"])


@router.get("/stock", response_model=List[StockAlertRead])
def stock_alerts(
    today: Optional[date] = Query(None, description="Reference date, defaults to today (UTC)"),
    horizon_days: Optional[int] = Query(None, ge=0, le=3650),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    alerts = scan_stock_alerts(db, today=today, horizon_days=horizon_days, limit=limit)
    return [StockAlertRead.model_validate(alert, from_attributes=True) for alert in alerts]


__all__ = ["router"]
