import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from shopledger.core.constants import UNCATEGORIZED
from shopledger.core.errors import ValidationError
from shopledger.core.money import ZERO, to_money
from shopledger.database.session import transaction
from shopledger.models.category import Category
from shopledger.models.product import Product, ProductBatch
from shopledger.schemas.product import BatchCreate, ProductCreate, ProductUpdate
from shopledger.services.stock_service import (
    BatchReceipt,
    find_batch_by_number,
    require_product,
    resolve_stock_delta,
)

logger = logging.getLogger(__name__)

_MAX_DISCOUNT = Decimal("100")

# NOT NULL columns an edit may change but never blank out.
_REQUIRED_FIELDS = ("name", "buy_price", "sell_price", "discount_percent", "reorder_level")


def _price(value, label: str) -> Decimal:
    try:
        amount = to_money(value)
    except ValueError as exc:
        raise ValidationError(f"{label}: {exc}") from exc
    if amount < ZERO:
        raise ValidationError(f"{label} must not be negative.")
    return amount


def _discount(value) -> Decimal:
    discount = _price(value, "discount_percent")
    if discount > _MAX_DISCOUNT:
        raise ValidationError("discount_percent must be between 0 and 100.")
    return discount


def _category_name(db: Session, category_id: int | None, fallback: str | None) -> str:
    if category_id is None:
        return (fallback or "").strip() or UNCATEGORIZED
    category = db.get(Category, category_id)
    if category is None:
        raise ValidationError(f"Category {category_id} not found.")
    return category.name


def _validate_batches(batches: list[BatchCreate]) -> None:
    seen = set()
    for batch in batches:
        number = (batch.batch_number or "").strip()
        if not number:
            raise ValidationError("Every batch needs a batch number.")
        if number in seen:
            raise ValidationError(f"Batch number {number!r} is listed twice.")
        seen.add(number)
        if batch.quantity <= 0:
            raise ValidationError(f"Batch {number!r}: quantity must be greater than zero.")
        if batch.buy_price is not None:
            _price(batch.buy_price, f"Batch {number!r} buy_price")


def _receipt(batch: BatchCreate) -> BatchReceipt:
    return BatchReceipt(
        batch_number=batch.batch_number,
        expiry_date=batch.expiry_date,
        buy_price=batch.buy_price,
        purchase_date=batch.purchase_date,
        supplier_id=batch.supplier_id,
        lot_number=batch.lot_number,
        notes=batch.notes,
    )


def get_product(db: Session, product_id: int) -> Product | None:
    return db.get(Product, product_id)


def list_products(
    db: Session,
    query: str | None = None,
    category_id: int | None = None,
    low_stock_only: bool = False,
) -> list[Product]:
    stmt = select(Product).order_by(Product.name, Product.id)
    if query:
        pattern = "%{}%".format(query.strip())
        stmt = stmt.where(Product.name.ilike(pattern) | Product.ean.ilike(pattern))
    if category_id is not None:
        stmt = stmt.where(Product.category_id == category_id)
    if low_stock_only:
        stmt = stmt.where(Product.stock <= Product.reorder_level)
    return list(db.execute(stmt).scalars().all())


def get_batches_by_product(db: Session, product_id: int) -> list[ProductBatch]:
    """Batches of a product, earliest expiry first (undated last)."""
    stmt = (
        select(ProductBatch)
        .where(ProductBatch.product_id == product_id)
        .order_by(
            ProductBatch.expiry_date.is_(None),
            ProductBatch.expiry_date,
            ProductBatch.id,
        )
    )
    return list(db.execute(stmt).scalars().all())


def create_product(db: Session, payload: ProductCreate) -> Product:
    name = (payload.name or "").strip()
    if not name:
        raise ValidationError("Product name is required.")
    if payload.reorder_level < 0:
        raise ValidationError("reorder_level must not be negative.")
    if payload.is_batch_tracked:
        _validate_batches(payload.batches)
    else:
        if payload.batches:
            raise ValidationError("Batches can only be given for batch-tracked products.")
        if payload.stock < 0:
            raise ValidationError("stock must not be negative.")

    product = Product(
        name=name,
        description=payload.description,
        brand=payload.brand,
        ean=payload.ean,
        scheme=payload.scheme,
        category=_category_name(db, payload.category_id, payload.category),
        category_id=payload.category_id,
        buy_price=_price(payload.buy_price, "buy_price"),
        sell_price=_price(payload.sell_price, "sell_price"),
        discount_percent=_discount(payload.discount_percent),
        reorder_level=payload.reorder_level,
        is_batch_tracked=payload.is_batch_tracked,
        # Batch-tracked products keep expiry on their batches only.
        expiry_date=None if payload.is_batch_tracked else payload.expiry_date,
        stock=0 if payload.is_batch_tracked else payload.stock,
    )

    with transaction(db):
        db.add(product)
        db.flush()
        for batch in payload.batches:
            resolve_stock_delta(db, product.id, batch.quantity, receipt=_receipt(batch))

    logger.info(
        "Created product %s (%s), stock %s",
        product.id,
        product.name,
        product.stock,
        extra={"product_id": product.id},
    )
    return product


def update_product(db: Session, product_id: int, payload: ProductUpdate) -> Product:
    """Edit catalogue fields. Stock only moves through the stock resolver."""
    product = require_product(db, product_id)
    changes = payload.model_dump(exclude_unset=True)

    for key in _REQUIRED_FIELDS:
        if key in changes and changes[key] is None:
            raise ValidationError(f"{key} cannot be cleared.")
    if "name" in changes:
        name = changes["name"].strip()
        if not name:
            raise ValidationError("Product name is required.")
        changes["name"] = name
    for key in ("buy_price", "sell_price"):
        if key in changes:
            changes[key] = _price(changes[key], key)
    if "discount_percent" in changes:
        changes["discount_percent"] = _discount(changes["discount_percent"])
    if "reorder_level" in changes and changes["reorder_level"] < 0:
        raise ValidationError("reorder_level must not be negative.")
    if "category_id" in changes:
        changes["category"] = _category_name(db, changes["category_id"], None)
    if product.is_batch_tracked and changes.get("expiry_date") is not None:
        raise ValidationError("Batch-tracked products carry expiry dates on their batches.")

    with transaction(db):
        for key, value in changes.items():
            setattr(product, key, value)

    return product


def add_batch(db: Session, product_id: int, payload: BatchCreate) -> ProductBatch:
    """Receive a new dated lot outside of a purchase (opening stock, transfers)."""
    product = require_product(db, product_id)
    if not product.is_batch_tracked:
        raise ValidationError(f"Product {product_id} is not batch tracked.")
    _validate_batches([payload])
    if find_batch_by_number(db, product_id, payload.batch_number.strip()) is not None:
        raise ValidationError(
            f"Batch {payload.batch_number!r} already exists for product {product_id}."
        )

    with transaction(db):
        change = resolve_stock_delta(db, product_id, payload.quantity, receipt=_receipt(payload))

    batch = db.get(ProductBatch, change.batch_id)
    logger.info(
        "Added batch %s to product %s (stock now %s)",
        batch.batch_number,
        product_id,
        change.stock_after,
        extra={"product_id": product_id, "batch_id": batch.id},
    )
    return batch


def enable_batch_tracking(db: Session, product_id: int, batches: list[BatchCreate]) -> Product:
    """Convert a single-counter product to batch tracking.

    The supplied batches become the whole stock; the old counter and the
    product-level expiry date are dropped.
    """
    product = require_product(db, product_id)
    if product.is_batch_tracked:
        raise ValidationError(f"Product {product_id} is already batch tracked.")
    if not batches:
        raise ValidationError("At least one batch is required to enable batch tracking.")
    _validate_batches(batches)

    previous_stock = product.stock
    with transaction(db):
        product.is_batch_tracked = True
        product.expiry_date = None
        for batch in batches:
            resolve_stock_delta(db, product.id, batch.quantity, receipt=_receipt(batch))

    if product.stock != previous_stock:
        logger.warning(
            "Product %s stock changed from %s to %s when batch tracking was enabled",
            product.id,
            previous_stock,
            product.stock,
            extra={"product_id": product.id},
        )
    return product


__all__ = [
    "add_batch",
    "create_product",
    "enable_batch_tracking",
    "get_batches_by_product",
    "get_product",
    "list_products",
    "update_product",
]
