from shopledger.core.constants import PARTY_SUPPLIER
from shopledger.models.payment import SupplierPayment
from shopledger.routers._parties import build_party_router
from shopledger.schemas.party import SupplierCreate
from shopledger.schemas.payment import SupplierPaymentCreate, SupplierPaymentRead
from shopledger.services.balance_service import apply_supplier_payment
from shopledger.services.party_service import create_supplier, delete_supplier, update_supplier

router = build_party_router(
    PARTY_SUPPLIER,
    prefix="/suppliers",
    tag="Suppliers",
    create_schema=SupplierCreate,
    create_party=create_supplier,
    update_party=update_supplier,
    delete_party=delete_supplier,
    payment_schema=SupplierPaymentCreate,
    payment_read_schema=SupplierPaymentRead,
    apply_payment=apply_supplier_payment,
    payment_model=SupplierPayment,
)

__all__ = ["router"]
