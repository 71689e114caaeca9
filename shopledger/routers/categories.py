from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shopledger.core.errors import LedgerError
from shopledger.dependencies import get_db, ledger_http_error
from shopledger.schemas.catalog import CategoryCreate, CategoryRead, CategoryUpdate
from shopledger.services.catalog_service import (
    create_category,
    delete_category,
    list_categories,
    update_category,
)

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.post("", response_model=CategoryRead, status_code=201)
def create_new_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    try:
        return create_category(db, payload)
    except LedgerError as exc:
        raise ledger_http_error(exc) from exc


@router.get("", response_model=List[CategoryRead])
def list_all_categories(db: Session = Depends(get_db)):
    return list_categories(db)


@router.patch("/{category_id}", response_model=CategoryRead)
def edit_category(category_id: int, payload: CategoryUpdate, db: Session = Depends(get_db)):
    try:
        return update_category(db, category_id, payload)
    except LedgerError as exc:
        raise ledger_http_error(exc) from exc


@router.delete("/{category_id}", status_code=204)
def remove_category(category_id: int, db: Session = Depends(get_db)):
    try:
        delete_category(db, category_id)
    except LedgerError as exc:
        raise ledger_http_error(exc) from exc


__all__ = ["router"]
