import unittest
from decimal import Decimal

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

from shopledger.core.errors import InsufficientStock, ValidationError
from shopledger.database.base import Base
from shopledger.models.party import Customer
from shopledger.models.product import Product, ProductBatch
from shopledger.models.sale import Sale, SaleItem
from shopledger.schemas.party import CustomerCreate
from shopledger.schemas.product import BatchCreate, ProductCreate
from shopledger.schemas.sale import SaleCreate, SaleItemCreate
from shopledger.services.party_service import create_customer
from shopledger.services.product_service import create_product, get_batches_by_product
from shopledger.services.sales_service import apply_sale, get_sale, list_sales


def _sale(items, total, due=None, customer_id=None, payment_type="cash"):
    return SaleCreate(
        items=items,
        subtotal=Decimal(total),
        total=Decimal(total),
        due_amount=Decimal(due) if due is not None else None,
        customer_id=customer_id,
        payment_type=payment_type,
    )


class ApplySaleTest(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine("sqlite:///:memory:")
        Base.metadata.create_all(bind=self.engine)
        Session = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)
        self.db = Session()

        self.tea = create_product(self.db, ProductCreate(name="Tea 400g", stock=10))
        self.soap = create_product(self.db, ProductCreate(name="Soap", stock=1))
        self.syrup = create_product(
            self.db,
            ProductCreate(
                name="Syrup",
                is_batch_tracked=True,
                batches=[
                    BatchCreate(batch_number="B1", quantity=5),
                    BatchCreate(batch_number="B2", quantity=10),
                ],
            ),
        )
        self.b1, self.b2 = get_batches_by_product(self.db, self.syrup.id)
        self.customer = create_customer(self.db, CustomerCreate(name="Karim"))

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def _count(self, model):
        return self.db.execute(select(func.count(model.id))).scalar_one()

    def test_cash_sale_reduces_stock(self):
        sale_id = apply_sale(
            self.db,
            _sale([SaleItemCreate(product_id=self.tea.id, quantity=3, price=Decimal("250"))], "750"),
        )

        sale = get_sale(self.db, sale_id)
        self.assertEqual(len(sale.items), 1)
        self.assertEqual(sale.items[0].name, "Tea 400g")
        self.assertEqual(sale.due_amount, Decimal("0.00"))
        self.assertEqual(self.tea.stock, 7)

    def test_batch_sale_then_overdraw_leaves_state_unchanged(self):
        line = SaleItemCreate(product_id=self.syrup.id, batch_id=self.b1.id, quantity=3, price=Decimal("60"))
        apply_sale(self.db, _sale([line], "180"))

        self.assertEqual(self.db.get(ProductBatch, self.b1.id).current_stock, 2)
        self.assertEqual(self.db.get(Product, self.syrup.id).stock, 12)

        with self.assertRaises(InsufficientStock):
            apply_sale(self.db, _sale([line], "180"))

        self.assertEqual(self.db.get(ProductBatch, self.b1.id).current_stock, 2)
        self.assertEqual(self.db.get(ProductBatch, self.b2.id).current_stock, 10)
        self.assertEqual(self.db.get(Product, self.syrup.id).stock, 12)
        self.assertEqual(self._count(Sale), 1)

    def test_failure_on_second_line_rolls_back_everything(self):
        payload = _sale(
            [
                SaleItemCreate(product_id=self.tea.id, quantity=2, price=Decimal("250")),
                SaleItemCreate(product_id=self.soap.id, quantity=5, price=Decimal("40")),
            ],
            "700",
            due="700",
            customer_id=self.customer.id,
            payment_type="credit",
        )
        with self.assertRaises(InsufficientStock) as ctx:
            apply_sale(self.db, payload)

        self.assertEqual(ctx.exception.product_id, self.soap.id)
        self.assertEqual(self.db.get(Product, self.tea.id).stock, 10)
        self.assertEqual(self.db.get(Product, self.soap.id).stock, 1)
        self.assertEqual(self.db.get(Customer, self.customer.id).current_balance, Decimal("0.00"))
        self.assertEqual(self._count(Sale), 0)
        self.assertEqual(self._count(SaleItem), 0)

    def test_due_is_added_to_customer_balance(self):
        apply_sale(
            self.db,
            _sale(
                [SaleItemCreate(product_id=self.tea.id, quantity=2, price=Decimal("250"))],
                "500",
                due="500",
                customer_id=self.customer.id,
                payment_type="credit",
            ),
        )

        self.assertEqual(self.db.get(Customer, self.customer.id).current_balance, Decimal("500.00"))

    def test_due_without_customer_rejected(self):
        with self.assertRaises(ValidationError):
            apply_sale(
                self.db,
                _sale([SaleItemCreate(product_id=self.tea.id, quantity=1, price=Decimal("250"))], "250", due="100"),
            )
        self.assertEqual(self._count(Sale), 0)

    def test_due_above_total_rejected(self):
        with self.assertRaises(ValidationError):
            apply_sale(
                self.db,
                _sale(
                    [SaleItemCreate(product_id=self.tea.id, quantity=1, price=Decimal("250"))],
                    "250",
                    due="300",
                    customer_id=self.customer.id,
                ),
            )

    def test_unknown_customer_rejected(self):
        with self.assertRaises(ValidationError):
            apply_sale(
                self.db,
                _sale(
                    [SaleItemCreate(product_id=self.tea.id, quantity=1, price=Decimal("250"))],
                    "250",
                    customer_id=404,
                ),
            )
        self.assertEqual(self.tea.stock, 10)

    def test_batch_tracked_line_without_batch_rejected(self):
        with self.assertRaises(ValidationError):
            apply_sale(
                self.db,
                _sale([SaleItemCreate(product_id=self.syrup.id, quantity=1, price=Decimal("60"))], "60"),
            )

    def test_empty_and_non_positive_lines_rejected(self):
        with self.assertRaises(ValidationError):
            apply_sale(self.db, _sale([], "0"))
        with self.assertRaises(ValidationError):
            apply_sale(
                self.db,
                _sale([SaleItemCreate(product_id=self.tea.id, quantity=0, price=Decimal("250"))], "0"),
            )

    def test_unknown_payment_type_rejected(self):
        with self.assertRaises(ValidationError):
            apply_sale(
                self.db,
                _sale(
                    [SaleItemCreate(product_id=self.tea.id, quantity=1, price=Decimal("250"))],
                    "250",
                    payment_type="barter",
                ),
            )

    def test_list_sales_filters_by_customer(self):
        apply_sale(
            self.db,
            _sale([SaleItemCreate(product_id=self.tea.id, quantity=1, price=Decimal("250"))], "250"),
        )
        apply_sale(
            self.db,
            _sale(
                [SaleItemCreate(product_id=self.tea.id, quantity=1, price=Decimal("250"))],
                "250",
                due="250",
                customer_id=self.customer.id,
                payment_type="credit",
            ),
        )

        self.assertEqual(len(list_sales(self.db)), 2)
        self.assertEqual([s.customer_id for s in list_sales(self.db, customer_id=self.customer.id)], [self.customer.id])


if __name__ == "__main__":
    unittest.main()
