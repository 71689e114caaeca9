import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from shopledger.core.constants import PARTY_CUSTOMER, SALE_PAYMENT_TYPES
from shopledger.core.dates import utc_or_now
from shopledger.core.errors import ValidationError
from shopledger.core.money import ZERO, to_money
from shopledger.database.session import transaction
from shopledger.models.party import Customer
from shopledger.models.product import Product
from shopledger.models.sale import Sale, SaleItem
from shopledger.schemas.sale import SaleCreate
from shopledger.services.balance_service import apply_balance_delta
from shopledger.services.party_service import get_party
from shopledger.services.stock_service import check_stock_target, require_product, resolve_stock_delta

logger = logging.getLogger(__name__)


def _money_field(value, label: str) -> Decimal:
    try:
        amount = to_money(value)
    except ValueError as exc:
        raise ValidationError(f"{label}: {exc}") from exc
    if amount < ZERO:
        raise ValidationError(f"{label} must not be negative.")
    return amount


def validate_sale(db: Session, payload: SaleCreate) -> tuple[dict[int, Product], Customer | None, Decimal]:
    """Reject malformed sales before anything is written.

    Stock sufficiency is not checked here; the resolver raises
    ``InsufficientStock`` inside the transaction.
    """
    if not payload.items:
        raise ValidationError("A sale needs at least one line item.")

    _money_field(payload.subtotal, "subtotal")
    _money_field(payload.discount, "discount")
    total = _money_field(payload.total, "total")
    if payload.tax is not None:
        _money_field(payload.tax, "tax")
    due = _money_field(payload.due_amount, "due_amount")
    if due > total:
        raise ValidationError("due_amount cannot exceed the sale total.")

    if payload.payment_type is not None and payload.payment_type not in SALE_PAYMENT_TYPES:
        raise ValidationError(f"Unknown payment type: {payload.payment_type!r}")

    customer = None
    if payload.customer_id is not None:
        customer = get_party(db, PARTY_CUSTOMER, payload.customer_id)
        if customer is None:
            raise ValidationError(f"Customer {payload.customer_id} not found.")
    if due > ZERO and customer is None:
        raise ValidationError("A sale with an amount due needs a customer.")

    products = {}
    for index, item in enumerate(payload.items, start=1):
        if item.quantity <= 0:
            raise ValidationError(f"Line {index}: quantity must be greater than zero.")
        _money_field(item.price, f"Line {index} price")
        _money_field(item.item_discount, f"Line {index} item_discount")
        product = products.get(item.product_id) or require_product(db, item.product_id)
        check_stock_target(db, product, -item.quantity, batch_id=item.batch_id)
        products[product.id] = product

    return products, customer, due


def apply_sale(db: Session, payload: SaleCreate) -> int:
    """Record a finalized sale, take its items out of stock and book any due.

    All of it commits together; an ``InsufficientStock`` on any line leaves
    no trace of the sale.
    """
    products, customer, due = validate_sale(db, payload)

    with transaction(db):
        sale = Sale(
            date=utc_or_now(payload.date),
            subtotal=to_money(payload.subtotal),
            discount=to_money(payload.discount),
            tax=to_money(payload.tax) if payload.tax is not None else None,
            total=to_money(payload.total),
            customer_id=customer.id if customer is not None else None,
            payment_type=payload.payment_type,
            due_amount=due,
            items=[
                SaleItem(
                    product_id=item.product_id,
                    batch_id=item.batch_id,
                    name=item.name or products[item.product_id].name,
                    quantity=item.quantity,
                    price=to_money(item.price),
                    item_discount=to_money(item.item_discount),
                    scheme=item.scheme,
                )
                for item in payload.items
            ],
        )
        db.add(sale)

        for item in payload.items:
            resolve_stock_delta(db, item.product_id, -item.quantity, batch_id=item.batch_id)

        if customer is not None and due > ZERO:
            apply_balance_delta(customer, due)

        db.flush()

    logger.info(
        "Sale %s committed: %s items, total %s, due %s",
        sale.id,
        len(payload.items),
        sale.total,
        due,
        extra={"sale_id": sale.id, "party_id": sale.customer_id},
    )
    return sale.id


def get_sale(db: Session, sale_id: int) -> Sale | None:
    return (
        db.execute(select(Sale).options(selectinload(Sale.items)).where(Sale.id == sale_id))
        .scalars()
        .first()
    )


def list_sales(db: Session, customer_id: int | None = None, limit: int = 200) -> list[Sale]:
    stmt = select(Sale).options(selectinload(Sale.items)).order_by(Sale.date.desc(), Sale.id.desc())
    if customer_id is not None:
        stmt = stmt.where(Sale.customer_id == customer_id)
    return list(db.execute(stmt.limit(limit)).scalars().all())


__all__ = ["apply_sale", "get_sale", "list_sales", "validate_sale"]
