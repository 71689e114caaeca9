"""Low-stock and expiry alerts.

A read-only scan over current stock. Nothing here writes, and the ledger
services never call it; it is run on demand by whoever displays alerts.
"""

from dataclasses import dataclass
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from shopledger.config import get_settings
from shopledger.core.constants import ALERT_EXPIRY, ALERT_LOW_STOCK
from shopledger.core.dates import days_until, utc_now
from shopledger.models.product import Product, ProductBatch


@dataclass(frozen=True)
class StockAlert:
    type: str
    product_id: int
    product_name: str
    message: str
    stock: int
    batch_id: int | None = None
    batch_number: str | None = None
    expiry_date: date | None = None
    days_to_expiry: int | None = None
    expired: bool = False


def _expiry_message(name, batch_number, days_left, expiry_date):
    label = name if not batch_number else "{} (batch {})".format(name, batch_number)
    if days_left < 0:
        return "{} expired on {}.".format(label, expiry_date.isoformat())
    if days_left == 0:
        return "{} expires today.".format(label)
    return "{} expires in {} days ({}).".format(label, days_left, expiry_date.isoformat())


def low_stock_alerts(db: Session) -> list[StockAlert]:
    products = (
        db.execute(
            select(Product)
            .where(Product.stock <= Product.reorder_level)
            .order_by(Product.stock, Product.name)
        )
        .scalars()
        .all()
    )
    return [
        StockAlert(
            type=ALERT_LOW_STOCK,
            product_id=product.id,
            product_name=product.name,
            message="{} is low on stock ({} left, reorder at {}).".format(
                product.name, product.stock, product.reorder_level
            ),
            stock=product.stock,
        )
        for product in products
    ]


def expiry_alerts(db: Session, today: date, horizon_days: int) -> list[StockAlert]:
    cutoff = today + timedelta(days=horizon_days)
    alerts = []

    batch_rows = db.execute(
        select(ProductBatch, Product)
        .join(Product, Product.id == ProductBatch.product_id)
        .where(
            ProductBatch.current_stock > 0,
            ProductBatch.expiry_date.is_not(None),
            ProductBatch.expiry_date <= cutoff,
        )
    ).all()
    for batch, product in batch_rows:
        days_left = days_until(batch.expiry_date, today)
        alerts.append(
            StockAlert(
                type=ALERT_EXPIRY,
                product_id=product.id,
                product_name=product.name,
                message=_expiry_message(product.name, batch.batch_number, days_left, batch.expiry_date),
                stock=batch.current_stock,
                batch_id=batch.id,
                batch_number=batch.batch_number,
                expiry_date=batch.expiry_date,
                days_to_expiry=days_left,
                expired=days_left < 0,
            )
        )

    products = (
        db.execute(
            select(Product).where(
                Product.is_batch_tracked.is_(False),
                Product.stock > 0,
                Product.expiry_date.is_not(None),
                Product.expiry_date <= cutoff,
            )
        )
        .scalars()
        .all()
    )
    for product in products:
        days_left = days_until(product.expiry_date, today)
        alerts.append(
            StockAlert(
                type=ALERT_EXPIRY,
                product_id=product.id,
                product_name=product.name,
                message=_expiry_message(product.name, None, days_left, product.expiry_date),
                stock=product.stock,
                expiry_date=product.expiry_date,
                days_to_expiry=days_left,
                expired=days_left < 0,
            )
        )

    alerts.sort(key=lambda alert: (alert.expiry_date, alert.product_id, alert.batch_id or 0))
    return alerts


def scan_stock_alerts(
    db: Session,
    today: date | None = None,
    horizon_days: int | None = None,
    limit: int | None = None,
) -> list[StockAlert]:
    settings = get_settings()
    today = today or utc_now().date()
    if horizon_days is None:
        horizon_days = settings.EXPIRY_ALERT_DAYS
    if limit is None:
        limit = settings.EXPIRY_ALERT_LIMIT

    expiring = expiry_alerts(db, today, horizon_days)[:limit]
    return low_stock_alerts(db) + expiring


__all__ = ["StockAlert", "expiry_alerts", "low_stock_alerts", "scan_stock_alerts"]
