"""Routes shared by the customer and supplier routers.

Both party kinds expose the same surface; only the payment schema and the
service that applies it differ.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from shopledger.core.errors import LedgerError
from shopledger.dependencies import get_db, ledger_http_error
from shopledger.schemas.ledger import PartyLedgerRead
from shopledger.schemas.party import PartyRead, PartyUpdate
from shopledger.services.ledger_service import get_party_ledger
from shopledger.services.party_service import get_party, list_parties


def build_party_router(
    party_type: str,
    prefix: str,
    tag: str,
    create_schema,
    create_party,
    update_party,
    delete_party,
    payment_schema,
    payment_read_schema,
    apply_payment,
    payment_model,
) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[tag])
    label = party_type.capitalize()

    @router.post("", response_model=PartyRead, status_code=201)
    def create(payload: create_schema, db: Session = Depends(get_db)):
        try:
            return create_party(db, payload)
        except LedgerError as exc:
            raise ledger_http_error(exc) from exc

    @router.get("", response_model=List[PartyRead])
    def list_all(
        query: Optional[str] = Query(None, description="Name or phone search"),
        db: Session = Depends(get_db),
    ):
        return list_parties(db, party_type, query=query)

    @router.get("/{party_id}", response_model=PartyRead)
    def read(party_id: int, db: Session = Depends(get_db)):
        party = get_party(db, party_type, party_id)
        if party is None:
            raise HTTPException(status_code=404, detail=f"{label} not found.")
        return party

    @router.patch("/{party_id}", response_model=PartyRead)
    def update(party_id: int, payload: PartyUpdate, db: Session = Depends(get_db)):
        try:
            return update_party(db, party_id, payload)
        except LedgerError as exc:
            raise ledger_http_error(exc) from exc

    @router.delete("/{party_id}", status_code=204)
    def delete(party_id: int, db: Session = Depends(get_db)):
        try:
            delete_party(db, party_id)
        except LedgerError as exc:
            raise ledger_http_error(exc) from exc

    @router.post("/{party_id}/payments", response_model=payment_read_schema, status_code=201)
    def record_payment(party_id: int, payload: payment_schema, db: Session = Depends(get_db)):
        payload = payload.model_copy(update={f"{party_type}_id": party_id})
        try:
            payment_id = apply_payment(db, payload)
        except LedgerError as exc:
            raise ledger_http_error(exc) from exc
        return db.get(payment_model, payment_id)

    @router.get("/{party_id}/ledger", response_model=PartyLedgerRead)
    def read_ledger(party_id: int, db: Session = Depends(get_db)):
        try:
            ledger = get_party_ledger(db, party_type, party_id)
        except LedgerError as exc:
            raise ledger_http_error(exc) from exc
        return PartyLedgerRead.model_validate(ledger, from_attributes=True)

    return router


__all__ = ["build_party_router"]
