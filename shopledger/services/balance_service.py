"""Running party balances.

``current_balance`` is a cache of the event log, moved by the same signed
deltas the ledger view projects:

* Customer: sale due +, ``received`` payment -, ``given`` payment +.
* Supplier: purchase total +, ``paid`` payment -, ``received_refund`` +.

A positive balance always means money is owed *to* the shop for a customer
and *by* the shop for a supplier.
"""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from shopledger.core.constants import (
    CUSTOMER_PAYMENT_TYPES,
    PARTY_CUSTOMER,
    PARTY_SUPPLIER,
    PAYMENT_RECEIVED,
    SUPPLIER_PAID,
    SUPPLIER_PAYMENT_TYPES,
)
from shopledger.core.dates import utc_or_now
from shopledger.core.errors import ValidationError
from shopledger.core.money import ZERO, to_money
from shopledger.database.session import transaction
from shopledger.models.party import Customer, Supplier
from shopledger.models.payment import Payment, SupplierPayment
from shopledger.models.purchase import Purchase
from shopledger.schemas.payment import PaymentCreate, SupplierPaymentCreate
from shopledger.services.party_service import require_party

logger = logging.getLogger(__name__)


def customer_payment_delta(payment_type: str, amount) -> Decimal:
    if payment_type not in CUSTOMER_PAYMENT_TYPES:
        raise ValidationError(f"Unknown customer payment type: {payment_type!r}")
    amount = to_money(amount)
    return -amount if payment_type == PAYMENT_RECEIVED else amount


def supplier_payment_delta(payment_type: str, amount) -> Decimal:
    if payment_type not in SUPPLIER_PAYMENT_TYPES:
        raise ValidationError(f"Unknown supplier payment type: {payment_type!r}")
    amount = to_money(amount)
    return -amount if payment_type == SUPPLIER_PAID else amount


def apply_balance_delta(party: Customer | Supplier, delta) -> Decimal:
    party.current_balance = to_money(party.current_balance) + to_money(delta)
    return party.current_balance


def _positive_amount(value) -> Decimal:
    try:
        amount = to_money(value)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc
    if amount <= ZERO:
        raise ValidationError("Payment amount must be greater than zero.")
    return amount


def record_supplier_payment(
    db: Session,
    supplier: Supplier,
    amount: Decimal,
    payment_type: str,
    paid_at: datetime,
    notes: str | None = None,
    purchase_id: int | None = None,
) -> SupplierPayment:
    """Write a supplier payment row and move the balance; caller commits."""
    payment = SupplierPayment(
        supplier_id=supplier.id,
        purchase_id=purchase_id,
        amount=amount,
        type=payment_type,
        date=paid_at,
        notes=notes,
    )
    db.add(payment)
    apply_balance_delta(supplier, supplier_payment_delta(payment_type, amount))
    return payment


def apply_customer_payment(db: Session, payload: PaymentCreate) -> int:
    amount = _positive_amount(payload.amount)
    delta = customer_payment_delta(payload.type, amount)
    customer = require_party(db, PARTY_CUSTOMER, payload.customer_id)
    paid_at = utc_or_now(payload.date)

    with transaction(db):
        payment = Payment(
            customer_id=customer.id,
            amount=amount,
            type=payload.type,
            date=paid_at,
            notes=payload.notes,
        )
        db.add(payment)
        apply_balance_delta(customer, delta)
        db.flush()

    logger.info(
        "Customer payment %s (%s %s) applied; balance now %s",
        payment.id,
        payload.type,
        amount,
        customer.current_balance,
        extra={"payment_id": payment.id, "party_type": PARTY_CUSTOMER, "party_id": customer.id},
    )
    return payment.id


def apply_supplier_payment(db: Session, payload: SupplierPaymentCreate) -> int:
    amount = _positive_amount(payload.amount)
    supplier_payment_delta(payload.type, amount)
    supplier = require_party(db, PARTY_SUPPLIER, payload.supplier_id)
    if payload.purchase_id is not None:
        purchase = db.get(Purchase, payload.purchase_id)
        if purchase is None or purchase.supplier_id != supplier.id:
            raise ValidationError(
                f"Purchase {payload.purchase_id} does not belong to supplier {supplier.id}."
            )
    paid_at = utc_or_now(payload.date)

    with transaction(db):
        payment = record_supplier_payment(
            db,
            supplier,
            amount,
            payload.type,
            paid_at,
            notes=payload.notes,
            purchase_id=payload.purchase_id,
        )
        db.flush()

    logger.info(
        "Supplier payment %s (%s %s) applied; balance now %s",
        payment.id,
        payload.type,
        amount,
        supplier.current_balance,
        extra={"payment_id": payment.id, "party_type": PARTY_SUPPLIER, "party_id": supplier.id},
    )
    return payment.id


__all__ = [
    "apply_balance_delta",
    "apply_customer_payment",
    "apply_supplier_payment",
    "customer_payment_delta",
    "record_supplier_payment",
    "supplier_payment_delta",
]
