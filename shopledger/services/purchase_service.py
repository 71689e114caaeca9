import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from shopledger.core.constants import PARTY_SUPPLIER, SUPPLIER_PAID
from shopledger.core.dates import utc_or_now
from shopledger.core.errors import ValidationError
from shopledger.core.money import ZERO, to_money
from shopledger.database.session import transaction
from shopledger.models.party import Supplier
from shopledger.models.product import Product
from shopledger.models.purchase import Purchase, PurchaseItem
from shopledger.schemas.purchase import PurchaseCreate
from shopledger.services.balance_service import apply_balance_delta, record_supplier_payment
from shopledger.services.party_service import get_party
from shopledger.services.stock_service import (
    BatchReceipt,
    check_stock_target,
    require_product,
    resolve_stock_delta,
)

logger = logging.getLogger(__name__)


def _amount(value, label: str) -> Decimal:
    try:
        amount = to_money(value)
    except ValueError as exc:
        raise ValidationError(f"{label}: {exc}") from exc
    if amount < ZERO:
        raise ValidationError(f"{label} must not be negative.")
    return amount


def _receipt_for(item, supplier_id, received_on) -> BatchReceipt | None:
    if not item.batch_number:
        return None
    return BatchReceipt(
        batch_number=item.batch_number,
        expiry_date=item.expiry_date,
        buy_price=item.buy_price,
        purchase_date=received_on,
        supplier_id=supplier_id,
    )


def validate_purchase(
    db: Session, payload: PurchaseCreate
) -> tuple[dict[int, Product], Supplier | None, Decimal, Decimal, Decimal]:
    if not payload.items:
        raise ValidationError("A purchase needs at least one line item.")

    grand_total = _amount(payload.grand_total, "grand_total")
    paid = _amount(payload.paid_amount, "paid_amount")
    if paid > grand_total:
        raise ValidationError("paid_amount cannot exceed grand_total.")
    due = grand_total - paid

    supplier = None
    if payload.supplier_id is not None:
        supplier = get_party(db, PARTY_SUPPLIER, payload.supplier_id)
        if supplier is None:
            raise ValidationError(f"Supplier {payload.supplier_id} not found.")
    if due > ZERO and supplier is None:
        raise ValidationError("A purchase with an amount due needs a supplier.")

    products = {}
    for index, item in enumerate(payload.items, start=1):
        if item.quantity <= 0:
            raise ValidationError(f"Line {index}: quantity must be greater than zero.")
        _amount(item.buy_price, f"Line {index} buy_price")
        if item.total is not None:
            _amount(item.total, f"Line {index} total")
        product = products.get(item.product_id) or require_product(db, item.product_id)
        check_stock_target(
            db,
            product,
            item.quantity,
            receipt=_receipt_for(item, payload.supplier_id, None),
        )
        products[product.id] = product

    return products, supplier, grand_total, paid, due


def apply_purchase(db: Session, payload: PurchaseCreate) -> int:
    """Receive a purchase into stock and book it against the supplier.

    The purchase row carries the full liability. Whatever was paid on the
    spot is written as its own ``paid`` supplier payment linked to the
    purchase, so the supplier balance moves by exactly the due amount.
    """
    products, supplier, grand_total, paid, due = validate_purchase(db, payload)
    purchased_at = utc_or_now(payload.date)

    with transaction(db):
        purchase = Purchase(
            date=purchased_at,
            supplier_id=supplier.id if supplier is not None else None,
            grand_total=grand_total,
            paid_amount=paid,
            due_amount=due,
            notes=payload.notes,
        )
        db.add(purchase)
        db.flush()

        for item in payload.items:
            product = products[item.product_id]
            buy_price = to_money(item.buy_price)
            receipt = _receipt_for(item, purchase.supplier_id, purchased_at.date())
            change = resolve_stock_delta(db, product.id, item.quantity, receipt=receipt)
            # Last purchase price wins.
            product.buy_price = buy_price
            purchase.items.append(
                PurchaseItem(
                    product_id=product.id,
                    batch_id=change.batch_id,
                    name=item.name or product.name,
                    quantity=item.quantity,
                    buy_price=buy_price,
                    total=to_money(item.total) if item.total is not None else buy_price * item.quantity,
                    batch_number=item.batch_number if change.batch_id is not None else None,
                    expiry_date=item.expiry_date if change.batch_id is not None else None,
                )
            )

        if supplier is not None:
            apply_balance_delta(supplier, grand_total)
            if paid > ZERO:
                record_supplier_payment(
                    db,
                    supplier,
                    paid,
                    SUPPLIER_PAID,
                    purchased_at,
                    notes=f"Instant payment for purchase #{purchase.id}",
                    purchase_id=purchase.id,
                )

        db.flush()

    logger.info(
        "Purchase %s committed: %s items, total %s, paid %s, due %s",
        purchase.id,
        len(payload.items),
        grand_total,
        paid,
        due,
        extra={"purchase_id": purchase.id, "party_id": purchase.supplier_id},
    )
    return purchase.id


def get_purchase(db: Session, purchase_id: int) -> Purchase | None:
    return (
        db.execute(
            select(Purchase).options(selectinload(Purchase.items)).where(Purchase.id == purchase_id)
        )
        .scalars()
        .first()
    )


def list_purchases(db: Session, supplier_id: int | None = None, limit: int = 200) -> list[Purchase]:
    stmt = (
        select(Purchase)
        .options(selectinload(Purchase.items))
        .order_by(Purchase.date.desc(), Purchase.id.desc())
    )
    if supplier_id is not None:
        stmt = stmt.where(Purchase.supplier_id == supplier_id)
    return list(db.execute(stmt.limit(limit)).scalars().all())


__all__ = ["apply_purchase", "get_purchase", "list_purchases", "validate_purchase"]
