"""Stock resolution for plain and batch-tracked products.

Every quantity change against a product goes through ``resolve_stock_delta``.
Plain products keep a single counter in ``Product.stock``. Batch-tracked
products keep their stock in ``ProductBatch.current_stock`` and
``Product.stock`` is recomputed from the batch rows after each change, so the
two can never drift through arithmetic.

The resolver never commits; callers run it inside their own transaction.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from shopledger.core.dates import utc_now
from shopledger.core.errors import InsufficientStock, ProductNotFound, ValidationError
from shopledger.core.money import to_money
from shopledger.database.session import transaction
from shopledger.models.product import Product, ProductBatch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchReceipt:
    batch_number: str
    expiry_date: Optional[date] = None
    buy_price: Optional[Decimal] = None
    purchase_date: Optional[date] = None
    supplier_id: Optional[int] = None
    lot_number: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class StockChange:
    product_id: int
    delta: int
    stock_after: int
    batch_id: Optional[int] = None
    batch_stock_after: Optional[int] = None


def require_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise ProductNotFound(product_id)
    return product


def find_batch_by_number(db: Session, product_id: int, batch_number: str) -> ProductBatch | None:
    db.flush()
    return (
        db.execute(
            select(ProductBatch).where(
                ProductBatch.product_id == product_id,
                ProductBatch.batch_number == batch_number,
            )
        )
        .scalars()
        .first()
    )


def batch_stock_total(db: Session, product_id: int) -> int:
    db.flush()
    total = db.execute(
        select(func.coalesce(func.sum(ProductBatch.current_stock), 0)).where(
            ProductBatch.product_id == product_id
        )
    ).scalar_one()
    return int(total)


def sync_product_stock(db: Session, product: Product) -> int:
    product.stock = batch_stock_total(db, product.id)
    return product.stock


def check_stock_target(
    db: Session,
    product: Product,
    delta: int,
    batch_id: int | None = None,
    receipt: BatchReceipt | None = None,
) -> ProductBatch | None:
    """Validate where a change would land without touching any quantity.

    Returns the targeted batch when one is named by id.
    """
    if delta == 0:
        raise ValidationError("Stock change must be non-zero.")

    if not product.is_batch_tracked:
        if batch_id is not None:
            raise ValidationError(
                f"Product {product.id} is not batch tracked; batch {batch_id} cannot be used."
            )
        return None

    if batch_id is None:
        if delta < 0:
            raise ValidationError(
                f"Product {product.id} is batch tracked; choose a batch before removing stock."
            )
        if receipt is None or not (receipt.batch_number or "").strip():
            raise ValidationError(
                f"Product {product.id} is batch tracked; a batch number is required to receive stock."
            )
        existing = find_batch_by_number(db, product.id, receipt.batch_number.strip())
        if existing is not None:
            _check_receipt_matches(existing, receipt)
        return None

    batch = db.get(ProductBatch, batch_id)
    if batch is None or batch.product_id != product.id:
        raise ValidationError(f"Batch {batch_id} does not belong to product {product.id}.")
    return batch


def _check_receipt_matches(batch: ProductBatch, receipt: BatchReceipt) -> None:
    """A batch number names one lot: one expiry date and one buy price."""
    if (
        receipt.expiry_date is not None
        and batch.expiry_date is not None
        and receipt.expiry_date != batch.expiry_date
    ):
        raise ValidationError(
            f"Batch {batch.batch_number!r} expires on {batch.expiry_date.isoformat()}, "
            f"not {receipt.expiry_date.isoformat()}; use a new batch number."
        )
    if receipt.buy_price is not None and to_money(receipt.buy_price) != to_money(batch.buy_price):
        raise ValidationError(
            f"Batch {batch.batch_number!r} was bought at {to_money(batch.buy_price)}, "
            f"not {to_money(receipt.buy_price)}; use a new batch number."
        )


def _receive_into_batch(db: Session, product: Product, quantity: int, receipt: BatchReceipt) -> ProductBatch:
    batch_number = receipt.batch_number.strip()
    batch = find_batch_by_number(db, product.id, batch_number)
    if batch is not None:
        _check_receipt_matches(batch, receipt)
        batch.initial_stock += quantity
        batch.current_stock += quantity
        if receipt.expiry_date is not None and batch.expiry_date is None:
            batch.expiry_date = receipt.expiry_date
        return batch

    batch = ProductBatch(
        product_id=product.id,
        batch_number=batch_number,
        lot_number=receipt.lot_number,
        expiry_date=receipt.expiry_date,
        purchase_date=receipt.purchase_date or utc_now().date(),
        supplier_id=receipt.supplier_id,
        initial_stock=quantity,
        current_stock=quantity,
        buy_price=to_money(receipt.buy_price if receipt.buy_price is not None else product.buy_price),
        notes=receipt.notes,
    )
    db.add(batch)
    db.flush()
    return batch


def resolve_stock_delta(
    db: Session,
    product_id: int,
    delta: int,
    batch_id: int | None = None,
    receipt: BatchReceipt | None = None,
) -> StockChange:
    """Apply ``delta`` units to a product inside the caller's transaction.

    Negative deltas remove stock and raise ``InsufficientStock`` rather than
    leave a negative counter. Batch-tracked products need ``batch_id`` to
    remove stock, and ``batch_id`` or ``receipt`` to add it.
    """
    product = require_product(db, product_id)
    batch = check_stock_target(db, product, delta, batch_id=batch_id, receipt=receipt)

    if not product.is_batch_tracked:
        if receipt is not None:
            logger.debug("Ignoring batch receipt for untracked product %s", product.id)
        new_stock = product.stock + delta
        if new_stock < 0:
            raise InsufficientStock(product.id, requested=-delta, available=product.stock)
        product.stock = new_stock
        return StockChange(product_id=product.id, delta=delta, stock_after=new_stock)

    if batch is None:
        batch = _receive_into_batch(db, product, delta, receipt)
    elif delta < 0:
        if batch.current_stock + delta < 0:
            raise InsufficientStock(
                product.id,
                requested=-delta,
                available=batch.current_stock,
                batch_id=batch.id,
            )
        batch.current_stock += delta
    else:
        batch.initial_stock += delta
        batch.current_stock += delta

    stock_after = sync_product_stock(db, product)
    return StockChange(
        product_id=product.id,
        delta=delta,
        stock_after=stock_after,
        batch_id=batch.id,
        batch_stock_after=batch.current_stock,
    )


def adjust_stock(db: Session, product_id: int, delta: int, batch_id: int | None = None) -> StockChange:
    """Manual stock correction committed on its own."""
    product = require_product(db, product_id)
    check_stock_target(db, product, delta, batch_id=batch_id)

    with transaction(db):
        change = resolve_stock_delta(db, product_id, delta, batch_id=batch_id)

    logger.info(
        "Stock adjusted for product %s by %s (now %s)",
        product_id,
        delta,
        change.stock_after,
        extra={"product_id": product_id, "batch_id": change.batch_id},
    )
    return change


__all__ = [
    "BatchReceipt",
    "StockChange",
    "adjust_stock",
    "batch_stock_total",
    "check_stock_target",
    "find_batch_by_number",
    "require_product",
    "resolve_stock_delta",
    "sync_product_stock",
]
