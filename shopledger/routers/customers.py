from shopledger.core.constants import PARTY_CUSTOMER
from shopledger.models.payment import Payment
from shopledger.routers._parties import build_party_router
from shopledger.schemas.party import CustomerCreate
from shopledger.schemas.payment import PaymentCreate, PaymentRead
from shopledger.services.balance_service import apply_customer_payment
from shopledger.services.party_service import create_customer, delete_customer, update_customer

router = build_party_router(
    PARTY_CUSTOMER,
    prefix="/customers",
    tag="Customers",
    create_schema=CustomerCreate,
    create_party=create_customer,
    update_party=update_customer,
    delete_party=delete_customer,
    payment_schema=PaymentCreate,
    payment_read_schema=PaymentRead,
    apply_payment=apply_customer_payment,
    payment_model=Payment,
)

__all__ = ["router"]
