from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from shopledger.core.errors import LedgerError
from shopledger.dependencies import get_db, ledger_http_error
from shopledger.schemas.product import (
    BatchCreate,
    BatchRead,
    EnableBatchTracking,
    ProductCreate,
    ProductRead,
    ProductReadWithBatches,
    ProductUpdate,
    StockAdjustment,
)
from shopledger.services.product_service import (
    add_batch,
    create_product,
    enable_batch_tracking,
    get_batches_by_product,
    get_product,
    list_products,
    update_product,
)
from shopledger.services.stock_service import adjust_stock

router = APIRouter(prefix="/products", tags=["Products"])


def _product_with_batches(db: Session, product_id: int) -> ProductReadWithBatches:
    product = get_product(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found.")
    result = ProductReadWithBatches.model_validate(product)
    if product.is_batch_tracked:
        result.batches = [
            BatchRead.model_validate(batch) for batch in get_batches_by_product(db, product_id)
        ]
    return result


@router.get("", response_model=List[ProductRead])
def list_all_products(
    query: Optional[str] = Query(None, description="Name or EAN search"),
    category_id: Optional[int] = Query(None),
    low_stock: bool = Query(False, description="Only products at or below reorder level"),
    db: Session = Depends(get_db),
):
    return list_products(db, query=query, category_id=category_id, low_stock_only=low_stock)


@router.post("", response_model=ProductReadWithBatches, status_code=201)
def create_new_product(payload: ProductCreate, db: Session = Depends(get_db)):
    try:
        product = create_product(db, payload)
    except LedgerError as exc:
        raise ledger_http_error(exc) from exc
    return _product_with_batches(db, product.id)


@router.get("/{product_id}", response_model=ProductReadWithBatches)
def read_product(product_id: int, db: Session = Depends(get_db)):
    return _product_with_batches(db, product_id)


@router.patch("/{product_id}", response_model=ProductReadWithBatches)
def edit_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    try:
        update_product(db, product_id, payload)
    except LedgerError as exc:
        raise ledger_http_error(exc) from exc
    return _product_with_batches(db, product_id)


@router.get("/{product_id}/batches", response_model=List[BatchRead])
def read_batches(product_id: int, db: Session = Depends(get_db)):
    if not get_product(db, product_id):
        raise HTTPException(status_code=404, detail="Product not found.")
    return get_batches_by_product(db, product_id)


@router.post("/{product_id}/batches", response_model=BatchRead, status_code=201)
def create_batch(product_id: int, payload: BatchCreate, db: Session = Depends(get_db)):
    try:
        return add_batch(db, product_id, payload)
    except LedgerError as exc:
        raise ledger_http_error(exc) from exc


@router.post("/{product_id}/batch-tracking", response_model=ProductReadWithBatches)
def convert_to_batch_tracking(
    product_id: int,
    payload: EnableBatchTracking,
    db: Session = Depends(get_db),
):
    try:
        enable_batch_tracking(db, product_id, payload.batches)
    except LedgerError as exc:
        raise ledger_http_error(exc) from exc
    return _product_with_batches(db, product_id)


@router.post("/{product_id}/stock-adjustments", response_model=ProductReadWithBatches)
def adjust_product_stock(
    product_id: int,
    payload: StockAdjustment,
    db: Session = Depends(get_db),
):
    try:
        adjust_stock(db, product_id, payload.delta, batch_id=payload.batch_id)
    except LedgerError as exc:
        raise ledger_http_error(exc) from exc
    return _product_with_batches(db, product_id)


__all__ = ["router"]
