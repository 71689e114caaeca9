import argparse
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Ensure repo root is on sys.path when running this script directly.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from sqlalchemy import select

from shopledger.core.logging import setup_logging
from shopledger.database import SessionLocal
from shopledger.main import init_database
from shopledger.models.product import Product
from shopledger.schemas.party import CustomerCreate, SupplierCreate
from shopledger.schemas.payment import PaymentCreate
from shopledger.schemas.product import BatchCreate, ProductCreate
from shopledger.schemas.purchase import PurchaseCreate, PurchaseItemCreate
from shopledger.schemas.sale import SaleCreate, SaleItemCreate
from shopledger.services import (
    apply_customer_payment,
    apply_purchase,
    apply_sale,
    create_customer,
    create_product,
    create_supplier,
    get_batches_by_product,
)


def parse_args():
    parser = argparse.ArgumentParser(description="Seed a sample shop ledger.")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Seed even when products already exist.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()
    init_database()

    db = SessionLocal()
    try:
        has_product = db.execute(select(Product.id).limit(1)).first()
        if has_product and not args.force:
            print("Seed skipped: products already exist.")
            return

        today = date.today()
        rice = create_product(
            db,
            ProductCreate(
                name="Miniket Rice 5kg",
                category="Grocery",
                buy_price=Decimal("380"),
                sell_price=Decimal("420"),
                stock=40,
                reorder_level=10,
            ),
        )
        syrup = create_product(
            db,
            ProductCreate(
                name="Cough Syrup 100ml",
                category="Pharmacy",
                buy_price=Decimal("65"),
                sell_price=Decimal("85"),
                reorder_level=5,
                is_batch_tracked=True,
                batches=[
                    BatchCreate(batch_number="CS-2401", quantity=12, expiry_date=today + timedelta(days=20)),
                    BatchCreate(batch_number="CS-2407", quantity=30, expiry_date=today + timedelta(days=200)),
                ],
            ),
        )

        customer = create_customer(db, CustomerCreate(name="Rahim Traders", phone="01711000000"))
        supplier = create_supplier(db, SupplierCreate(name="Square Distribution", phone="01811000000"))

        apply_purchase(
            db,
            PurchaseCreate(
                supplier_id=supplier.id,
                grand_total=Decimal("7600"),
                paid_amount=Decimal("5000"),
                items=[PurchaseItemCreate(product_id=rice.id, quantity=20, buy_price=Decimal("380"))],
            ),
        )

        batches = {batch.batch_number: batch for batch in get_batches_by_product(db, syrup.id)}
        apply_sale(
            db,
            SaleCreate(
                customer_id=customer.id,
                subtotal=Decimal("1010"),
                total=Decimal("1010"),
                payment_type="credit",
                due_amount=Decimal("500"),
                items=[
                    SaleItemCreate(product_id=rice.id, quantity=2, price=Decimal("420")),
                    SaleItemCreate(
                        product_id=syrup.id,
                        batch_id=batches["CS-2401"].id,
                        quantity=2,
                        price=Decimal("85"),
                    ),
                ],
            ),
        )
        apply_customer_payment(db, PaymentCreate(customer_id=customer.id, amount=Decimal("200")))
        print("Seed data created.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
