from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shopledger.core.errors import LedgerError
from shopledger.dependencies import get_db, ledger_http_error
from shopledger.schemas.catalog import ExpenseCreate, ExpenseRead, ExpenseUpdate
from shopledger.services.catalog_service import (
    add_expense,
    delete_expense,
    list_expenses,
    update_expense,
)

router = APIRouter(prefix="/expenses", tags=["Expenses"])


@router.post("", response_model=ExpenseRead, status_code=201)
def create_expense(payload: ExpenseCreate, db: Session = Depends(get_db)):
    try:
        return add_expense(db, payload)
    except LedgerError as exc:
        raise ledger_http_error(exc) from exc


@router.get("", response_model=List[ExpenseRead])
def list_all_expenses(
    category: Optional[str] = Query(None),
    limit: int = Query(200, ge=1, le=2000),
    db: Session = Depends(get_db),
):
    return list_expenses(db, category=category, limit=limit)


@router.patch("/{expense_id}", response_model=ExpenseRead)
def edit_expense(expense_id: int, payload: ExpenseUpdate, db: Session = Depends(get_db)):
    try:
        return update_expense(db, expense_id, payload)
    except LedgerError as exc:
        raise ledger_http_error(exc) from exc


@router.delete("/{expense_id}", status_code=204)
def remove_expense(expense_id: int, db: Session = Depends(get_db)):
    try:
        delete_expense(db, expense_id)
    except LedgerError as exc:
        raise ledger_http_error(exc) from exc


__all__ = ["router"]
