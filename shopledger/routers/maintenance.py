from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shopledger.dependencies import get_db
from shopledger.schemas.ledger import DriftRead
from shopledger.services.ledger_service import reconcile_batch_stock, reconcile_party_balances

router = APIRouter(prefix="/maintenance", tags=["Maintenance"])


@router.post("/reconcile")
def reconcile(
    fix: bool = Query(False, description="Write the recomputed values back"),
    db: Session = Depends(get_db),
):
    try:
        drifts = reconcile_party_balances(db, fix=fix) + reconcile_batch_stock(db, fix=fix)
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return {
        "status": "completed",
        "fixed": fix,
        "drift_count": len(drifts),
        "drifts": [DriftRead.model_validate(drift, from_attributes=True) for drift in drifts],
    }


__all__ = ["router"]
