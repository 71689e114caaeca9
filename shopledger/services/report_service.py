"""Sales summary for the dashboard.

Days are UTC calendar days, matching how event times are stored.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from shopledger.core.dates import as_utc, utc_now
from shopledger.core.money import ZERO, to_money
from shopledger.models.sale import Sale, SaleItem

TREND_DAYS = 7
TOP_PRODUCT_LIMIT = 5


@dataclass(frozen=True)
class DailySales:
    day: date
    total: Decimal
    count: int


@dataclass(frozen=True)
class TopProduct:
    product_id: int
    name: str
    quantity: int
    revenue: Decimal


@dataclass(frozen=True)
class SalesSummary:
    today: date
    today_total: Decimal
    today_count: int
    month_total: Decimal
    month_count: int
    trend: list[DailySales] = field(default_factory=list)
    top_products: list[TopProduct] = field(default_factory=list)


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def sales_summary(db: Session, today: date | None = None) -> SalesSummary:
    today = today or utc_now().date()
    month_start = today.replace(day=1)
    trend_start = today - timedelta(days=TREND_DAYS - 1)
    window_start = _day_start(min(month_start, trend_start))
    window_end = _day_start(today + timedelta(days=1))

    rows = db.execute(
        select(Sale.date, Sale.total).where(Sale.date >= window_start, Sale.date < window_end)
    ).all()

    totals: dict[date, Decimal] = {}
    counts: dict[date, int] = {}
    for sale_date, total in rows:
        day = as_utc(sale_date).date()
        totals[day] = totals.get(day, ZERO) + to_money(total)
        counts[day] = counts.get(day, 0) + 1

    month_days = [day for day in totals if day >= month_start]
    trend = [
        DailySales(day=day, total=to_money(totals.get(day, ZERO)), count=counts.get(day, 0))
        for day in (trend_start + timedelta(days=offset) for offset in range(TREND_DAYS))
    ]

    top_rows = db.execute(
        select(
            SaleItem.product_id,
            SaleItem.name,
            func.sum(SaleItem.quantity),
            func.sum(SaleItem.quantity * SaleItem.price),
        )
        .join(Sale, Sale.id == SaleItem.sale_id)
        .where(Sale.date >= _day_start(month_start), Sale.date < window_end)
        .group_by(SaleItem.product_id, SaleItem.name)
        .order_by(func.sum(SaleItem.quantity).desc(), SaleItem.product_id)
        .limit(TOP_PRODUCT_LIMIT)
    ).all()

    return SalesSummary(
        today=today,
        today_total=to_money(totals.get(today, ZERO)),
        today_count=counts.get(today, 0),
        month_total=to_money(sum((totals[day] for day in month_days), ZERO)),
        month_count=sum(counts[day] for day in month_days),
        trend=trend,
        top_products=[
            TopProduct(
                product_id=product_id,
                name=name,
                quantity=int(quantity or 0),
                revenue=to_money(revenue or ZERO),
            )
            for product_id, name, quantity, revenue in top_rows
        ],
    )


__all__ = ["DailySales", "SalesSummary", "TopProduct", "sales_summary"]
