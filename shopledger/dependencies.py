import logging

from fastapi import HTTPException, status

from shopledger.core.errors import (
    InsufficientStock,
    LedgerError,
    PartyNotFound,
    ProductNotFound,
)
from shopledger.database.session import get_db

logger = logging.getLogger(__name__)


def ledger_http_error(exc: LedgerError) -> HTTPException:
    logger.warning("Rejected ledger operation: %s", exc)
    if isinstance(exc, (PartyNotFound, ProductNotFound)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, InsufficientStock):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": str(exc),
                "product_id": exc.product_id,
                "batch_id": exc.batch_id,
                "requested": exc.requested,
                "available": exc.available,
            },
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


__all__ = ["get_db", "ledger_http_error"]
