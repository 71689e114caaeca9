from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from shopledger.core.errors import LedgerError
from shopledger.dependencies import get_db, ledger_http_error
from shopledger.schemas.sale import SaleCreate, SaleRead
from shopledger.services.sales_service import apply_sale, get_sale, list_sales

router = APIRouter(prefix="/sales", tags=["Sales"])


@router.post("", response_model=SaleRead, status_code=201)
def create_sale(payload: SaleCreate, db: Session = Depends(get_db)):
    try:
        sale_id = apply_sale(db, payload)
    except LedgerError as exc:
        raise ledger_http_error(exc) from exc
    return get_sale(db, sale_id)


@router.get("", response_model=List[SaleRead])
def sales_history(
    customer_id: Optional[int] = Query(None),
    limit: int = Query(200, ge=1, le=2000),
    db: Session = Depends(get_db),
):
    return list_sales(db, customer_id=customer_id, limit=limit)


@router.get("/{sale_id}", response_model=SaleRead)
def read_sale(sale_id: int, db: Session = Depends(get_db)):
    sale = get_sale(db, sale_id)
    if not sale:
        raise HTTPException(status_code=404, detail="Sale not found.")
    return sale


__all__ = ["router"]
