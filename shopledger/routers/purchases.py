from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from shopledger.core.errors import LedgerError
from shopledger.dependencies import get_db, ledger_http_error
from shopledger.schemas.purchase import PurchaseCreate, PurchaseRead
from shopledger.services.purchase_service import apply_purchase, get_purchase, list_purchases

router = APIRouter(prefix="/purchases", tags=["Purchases"])


@router.post("", response_model=PurchaseRead, status_code=201)
def create_purchase(payload: PurchaseCreate, db: Session = Depends(get_db)):
    try:
        purchase_id = apply_purchase(db, payload)
    except LedgerError as exc:
        raise ledger_http_error(exc) from exc
    return get_purchase(db, purchase_id)


@router.get("", response_model=List[PurchaseRead])
def purchase_history(
    supplier_id: Optional[int] = Query(None),
    limit: int = Query(200, ge=1, le=2000),
    db: Session = Depends(get_db),
):
    return list_purchases(db, supplier_id=supplier_id, limit=limit)


@router.get("/{purchase_id}", response_model=PurchaseRead)
def read_purchase(purchase_id: int, db: Session = Depends(get_db)):
    purchase = get_purchase(db, purchase_id)
    if not purchase:
        raise HTTPException(status_code=404, detail="Purchase not found.")
    return purchase


__all__ = ["router"]
