class LedgerError(Exception):
    """Base class for rejected ledger operations."""


class ValidationError(LedgerError):
    pass


class ProductNotFound(ValidationError):
    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found.")


class PartyNotFound(LedgerError):
    def __init__(self, party_type, party_id):
        self.party_type = party_type
        self.party_id = party_id
        super().__init__(f"{party_type.capitalize()} {party_id} not found.")


class InsufficientStock(LedgerError):
    def __init__(self, product_id, requested, available, batch_id=None):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        self.batch_id = batch_id
        where = f"batch {batch_id} of product {product_id}" if batch_id else f"product {product_id}"
        super().__init__(
            f"Insufficient stock for {where}: requested {requested}, available {available}."
        )


__all__ = [
    "InsufficientStock",
    "LedgerError",
    "PartyNotFound",
    "ProductNotFound",
    "ValidationError",
]
