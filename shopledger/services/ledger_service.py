"""Party statements and balance reconciliation.

A statement is a projection of the stored events for one party. Each event
kind maps to one ``LedgerEntry`` with a debit and a credit column:

=================  ======================  ======================
kind               debit                   credit
=================  ======================  ======================
sale               due amount              -
payment            ``given`` amount        ``received`` amount
purchase           -                       grand total
supplier_payment   ``paid`` amount         ``received_refund``
=================  ======================  ======================

For a customer the balance moves by ``debit - credit``; for a supplier by
``credit - debit``. Starting from the opening balance, the entries must land
on the stored ``current_balance``; ``reconcile_party_balances`` reports (and
optionally repairs) any party where they do not.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import case, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from shopledger.core.constants import (
    PARTY_CUSTOMER,
    PARTY_SUPPLIER,
    PAYMENT_GIVEN,
    PAYMENT_RECEIVED,
    SUPPLIER_PAID,
    SUPPLIER_REFUND,
)
from shopledger.core.dates import as_utc
from shopledger.core.money import ZERO, to_money
from shopledger.models.payment import Payment, SupplierPayment
from shopledger.models.product import Product, ProductBatch
from shopledger.models.purchase import Purchase
from shopledger.models.sale import Sale
from shopledger.services.party_service import party_model, require_party

logger = logging.getLogger(__name__)


class LedgerEntryKind(str, Enum):
    SALE = "sale"
    PURCHASE = "purchase"
    PAYMENT = "payment"
    SUPPLIER_PAYMENT = "supplier_payment"


# Same-day tie break: the document before the cash that settles it.
_KIND_ORDER = {
    LedgerEntryKind.SALE: 0,
    LedgerEntryKind.PURCHASE: 0,
    LedgerEntryKind.PAYMENT: 1,
    LedgerEntryKind.SUPPLIER_PAYMENT: 1,
}


@dataclass(frozen=True)
class LedgerEntry:
    kind: LedgerEntryKind
    ref_id: int
    date: datetime
    description: str
    debit: Decimal
    credit: Decimal
    balance: Decimal = ZERO

    def balance_effect(self, party_type: str) -> Decimal:
        if party_type == PARTY_CUSTOMER:
            return self.debit - self.credit
        return self.credit - self.debit


@dataclass
class PartyLedger:
    party_type: str
    party_id: int
    name: str
    opening_balance: Decimal
    current_balance: Decimal
    computed_balance: Decimal
    entries: list[LedgerEntry] = field(default_factory=list)

    @property
    def in_sync(self) -> bool:
        return self.computed_balance == self.current_balance


@dataclass(frozen=True)
class Drift:
    kind: str
    entity_id: int
    stored: Decimal
    expected: Decimal
    fixed: bool = False
    detail: str | None = None


def _project_sale(sale: Sale) -> LedgerEntry:
    return LedgerEntry(
        kind=LedgerEntryKind.SALE,
        ref_id=sale.id,
        date=sale.date,
        description="Sale #{} - {} items".format(sale.id, len(sale.items)),
        debit=to_money(sale.due_amount),
        credit=ZERO,
    )


def _project_payment(payment: Payment) -> LedgerEntry:
    amount = to_money(payment.amount)
    received = payment.type == PAYMENT_RECEIVED
    return LedgerEntry(
        kind=LedgerEntryKind.PAYMENT,
        ref_id=payment.id,
        date=payment.date,
        description=payment.notes or ("Payment Received" if received else "Refund Given"),
        debit=ZERO if received else amount,
        credit=amount if received else ZERO,
    )


def _project_purchase(purchase: Purchase) -> LedgerEntry:
    return LedgerEntry(
        kind=LedgerEntryKind.PURCHASE,
        ref_id=purchase.id,
        date=purchase.date,
        description="Purchase #{} - {} items".format(purchase.id, len(purchase.items)),
        debit=ZERO,
        credit=to_money(purchase.grand_total),
    )


def _project_supplier_payment(payment: SupplierPayment) -> LedgerEntry:
    amount = to_money(payment.amount)
    paid = payment.type == SUPPLIER_PAID
    return LedgerEntry(
        kind=LedgerEntryKind.SUPPLIER_PAYMENT,
        ref_id=payment.id,
        date=payment.date,
        description=payment.notes or ("Payment to Supplier" if paid else "Refund from Supplier"),
        debit=amount if paid else ZERO,
        credit=ZERO if paid else amount,
    )


_PROJECTORS = {
    Sale: _project_sale,
    Payment: _project_payment,
    Purchase: _project_purchase,
    SupplierPayment: _project_supplier_payment,
}


def project_event(event) -> LedgerEntry:
    try:
        projector = _PROJECTORS[type(event)]
    except KeyError:
        raise TypeError(f"Not a ledger event: {type(event).__name__}") from None
    return projector(event)


def _load_events(db: Session, party_type: str, party_id: int) -> list:
    if party_type == PARTY_CUSTOMER:
        documents = db.execute(
            select(Sale).options(selectinload(Sale.items)).where(Sale.customer_id == party_id)
        ).scalars().all()
        payments = db.execute(
            select(Payment).where(Payment.customer_id == party_id)
        ).scalars().all()
    else:
        documents = db.execute(
            select(Purchase).options(selectinload(Purchase.items)).where(Purchase.supplier_id == party_id)
        ).scalars().all()
        payments = db.execute(
            select(SupplierPayment).where(SupplierPayment.supplier_id == party_id)
        ).scalars().all()
    return list(documents) + list(payments)


def _sort_key(entry: LedgerEntry):
    return (as_utc(entry.date), _KIND_ORDER[entry.kind], entry.ref_id)


def get_party_ledger(db: Session, party_type: str, party_id: int) -> PartyLedger:
    """Chronological statement for one party, newest entry first.

    Each entry carries the running balance after it was applied.
    """
    party = require_party(db, party_type, party_id)
    opening = to_money(party.opening_balance)

    chronological = sorted(
        (project_event(event) for event in _load_events(db, party_type, party_id)),
        key=_sort_key,
    )
    running = opening
    entries = []
    for entry in chronological:
        running += entry.balance_effect(party_type)
        entries.append(replace(entry, balance=running))
    entries.reverse()

    return PartyLedger(
        party_type=party_type,
        party_id=party.id,
        name=party.name,
        opening_balance=opening,
        current_balance=to_money(party.current_balance),
        computed_balance=running,
        entries=entries,
    )


def _sum(db: Session, column, *criteria) -> Decimal:
    value = db.execute(select(func.coalesce(func.sum(column), 0)).where(*criteria)).scalar_one()
    return to_money(value)


def expected_party_balance(db: Session, party_type: str, party) -> Decimal:
    """Balance recomputed from the event log with aggregate queries."""
    balance = to_money(party.opening_balance)
    if party_type == PARTY_CUSTOMER:
        balance += _sum(db, Sale.due_amount, Sale.customer_id == party.id)
        signed = case((Payment.type == PAYMENT_GIVEN, Payment.amount), else_=-Payment.amount)
        balance += _sum(db, signed, Payment.customer_id == party.id)
    else:
        balance += _sum(db, Purchase.grand_total, Purchase.supplier_id == party.id)
        signed = case(
            (SupplierPayment.type == SUPPLIER_REFUND, SupplierPayment.amount),
            else_=-SupplierPayment.amount,
        )
        balance += _sum(db, signed, SupplierPayment.supplier_id == party.id)
    return balance


def _commit_fixes(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def reconcile_party_balances(db: Session, fix: bool = False) -> list[Drift]:
    drifts = []
    for party_type in (PARTY_CUSTOMER, PARTY_SUPPLIER):
        model = party_model(party_type)
        for party in db.execute(select(model).order_by(model.id)).scalars().all():
            stored = to_money(party.current_balance)
            expected = expected_party_balance(db, party_type, party)
            if stored == expected:
                continue
            logger.warning(
                "%s %s balance drift: stored %s, expected %s",
                party_type.capitalize(),
                party.id,
                stored,
                expected,
                extra={"party_type": party_type, "party_id": party.id},
            )
            drifts.append(
                Drift(kind=party_type, entity_id=party.id, stored=stored, expected=expected, fixed=fix)
            )
            if fix:
                party.current_balance = expected

    if fix and drifts:
        _commit_fixes(db)
    return drifts


def reconcile_batch_stock(db: Session, fix: bool = False) -> list[Drift]:
    """Compare each batch-tracked product's stock with the sum of its batches."""
    batch_totals = (
        select(
            ProductBatch.product_id,
            func.coalesce(func.sum(ProductBatch.current_stock), 0).label("total"),
        )
        .group_by(ProductBatch.product_id)
        .subquery()
    )
    rows = db.execute(
        select(Product, func.coalesce(batch_totals.c.total, 0))
        .outerjoin(batch_totals, batch_totals.c.product_id == Product.id)
        .where(Product.is_batch_tracked.is_(True))
        .order_by(Product.id)
    ).all()

    drifts = []
    for product, total in rows:
        expected = int(total)
        if product.stock == expected:
            continue
        logger.warning(
            "Product %s stock drift: stored %s, batches sum to %s",
            product.id,
            product.stock,
            expected,
            extra={"product_id": product.id},
        )
        drifts.append(
            Drift(
                kind="product_stock",
                entity_id=product.id,
                stored=Decimal(product.stock),
                expected=Decimal(expected),
                fixed=fix,
                detail=product.name,
            )
        )
        if fix:
            product.stock = expected

    if fix and drifts:
        _commit_fixes(db)
    return drifts


__all__ = [
    "Drift",
    "LedgerEntry",
    "LedgerEntryKind",
    "PartyLedger",
    "expected_party_balance",
    "get_party_ledger",
    "project_event",
    "reconcile_batch_stock",
    "reconcile_party_balances",
]
