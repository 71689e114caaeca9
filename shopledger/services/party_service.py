import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from shopledger.core.constants import PARTY_CUSTOMER, PARTY_SUPPLIER, PARTY_TYPES
from shopledger.core.errors import PartyNotFound, ValidationError
from shopledger.core.money import to_money
from shopledger.database.session import transaction
from shopledger.models.party import Customer, Supplier
from shopledger.models.payment import Payment, SupplierPayment
from shopledger.models.purchase import Purchase
from shopledger.models.sale import Sale
from shopledger.schemas.party import PartyCreate, PartyUpdate

logger = logging.getLogger(__name__)

PARTY_MODELS = {
    PARTY_CUSTOMER: Customer,
    PARTY_SUPPLIER: Supplier,
}

# Tables whose rows pin a party in place: (model, party foreign key).
PARTY_EVENT_SOURCES = {
    PARTY_CUSTOMER: ((Sale, Sale.customer_id), (Payment, Payment.customer_id)),
    PARTY_SUPPLIER: ((Purchase, Purchase.supplier_id), (SupplierPayment, SupplierPayment.supplier_id)),
}


def party_model(party_type: str):
    if party_type not in PARTY_TYPES:
        raise ValidationError(f"Unknown party type: {party_type!r}")
    return PARTY_MODELS[party_type]


def get_party(db: Session, party_type: str, party_id: int | None):
    if party_id is None:
        return None
    return db.get(party_model(party_type), party_id)


def require_party(db: Session, party_type: str, party_id: int | None):
    party = get_party(db, party_type, party_id)
    if party is None:
        raise PartyNotFound(party_type, party_id)
    return party


def list_parties(db: Session, party_type: str, query: str | None = None):
    model = party_model(party_type)
    stmt = select(model).order_by(model.name, model.id)
    if query:
        pattern = "%{}%".format(query.strip())
        stmt = stmt.where(model.name.ilike(pattern) | model.phone.ilike(pattern))
    return list(db.execute(stmt).scalars().all())


def _create_party(db: Session, party_type: str, payload: PartyCreate):
    name = (payload.name or "").strip()
    if not name:
        raise ValidationError("Name is required.")

    opening = to_money(payload.opening_balance)
    model = party_model(party_type)
    party = model(
        name=name,
        phone=(payload.phone or "").strip(),
        address=payload.address,
        notes=payload.notes,
        opening_balance=opening,
        current_balance=opening,
    )
    with transaction(db):
        db.add(party)
        db.flush()

    logger.info(
        "Created %s %s (opening balance %s)",
        party_type,
        party.id,
        opening,
        extra={"party_type": party_type, "party_id": party.id},
    )
    return party


def create_customer(db: Session, payload: PartyCreate) -> Customer:
    return _create_party(db, PARTY_CUSTOMER, payload)


def create_supplier(db: Session, payload: PartyCreate) -> Supplier:
    return _create_party(db, PARTY_SUPPLIER, payload)


def get_customer(db: Session, customer_id: int) -> Customer | None:
    return get_party(db, PARTY_CUSTOMER, customer_id)


def get_supplier(db: Session, supplier_id: int) -> Supplier | None:
    return get_party(db, PARTY_SUPPLIER, supplier_id)


def count_party_events(db: Session, party_type: str, party_id: int) -> int:
    total = 0
    for model, party_column in PARTY_EVENT_SOURCES[party_type]:
        total += db.execute(
            select(func.count(model.id)).where(party_column == party_id)
        ).scalar_one()
    return total


def _update_party(db: Session, party_type: str, party_id: int, payload: PartyUpdate):
    """Edit contact details. Balances only move through ledger events."""
    party = require_party(db, party_type, party_id)
    changes = payload.model_dump(exclude_unset=True)

    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationError("Name is required.")
        changes["name"] = name
    if "phone" in changes:
        changes["phone"] = (changes["phone"] or "").strip()

    with transaction(db):
        for key, value in changes.items():
            setattr(party, key, value)
    return party


def _delete_party(db: Session, party_type: str, party_id: int) -> None:
    party = require_party(db, party_type, party_id)
    events = count_party_events(db, party_type, party_id)
    if events:
        raise ValidationError(
            f"{party_type.capitalize()} {party_id} has {events} ledger events and cannot be deleted."
        )

    with transaction(db):
        db.delete(party)

    logger.info(
        "Deleted %s %s",
        party_type,
        party_id,
        extra={"party_type": party_type, "party_id": party_id},
    )


def update_customer(db: Session, customer_id: int, payload: PartyUpdate) -> Customer:
    return _update_party(db, PARTY_CUSTOMER, customer_id, payload)


def update_supplier(db: Session, supplier_id: int, payload: PartyUpdate) -> Supplier:
    return _update_party(db, PARTY_SUPPLIER, supplier_id, payload)


def delete_customer(db: Session, customer_id: int) -> None:
    _delete_party(db, PARTY_CUSTOMER, customer_id)


def delete_supplier(db: Session, supplier_id: int) -> None:
    _delete_party(db, PARTY_SUPPLIER, supplier_id)


__all__ = [
    "count_party_events",
    "create_customer",
    "create_supplier",
    "delete_customer",
    "delete_supplier",
    "get_customer",
    "get_party",
    "get_supplier",
    "list_parties",
    "party_model",
    "require_party",
    "update_customer",
    "update_supplier",
]
