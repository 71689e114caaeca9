import unittest
from datetime import date
from decimal import Decimal

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from shopledger.core.errors import InsufficientStock, ProductNotFound, ValidationError
from shopledger.database.base import Base
from shopledger.models.product import Product, ProductBatch
from shopledger.schemas.product import BatchCreate, ProductCreate
from shopledger.services.product_service import create_product
from shopledger.services.stock_service import (
    BatchReceipt,
    adjust_stock,
    batch_stock_total,
    resolve_stock_delta,
)


class StockResolverTest(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine("sqlite:///:memory:")
        Base.metadata.create_all(bind=self.engine)
        Session = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)
        self.db = Session()

        self.plain = create_product(
            self.db, ProductCreate(name="Sugar 1kg", stock=10, buy_price=Decimal("90"))
        )
        self.tracked = create_product(
            self.db,
            ProductCreate(
                name="Paracetamol",
                is_batch_tracked=True,
                batches=[
                    BatchCreate(batch_number="B1", quantity=5, expiry_date=date(2027, 1, 31)),
                    BatchCreate(batch_number="B2", quantity=10, expiry_date=date(2027, 6, 30)),
                ],
            ),
        )
        self.b1, self.b2 = sorted(
            self.db.query(ProductBatch).filter_by(product_id=self.tracked.id),
            key=lambda batch: batch.batch_number,
        )

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_tracked_product_stock_is_batch_sum(self):
        self.assertEqual(self.tracked.stock, 15)
        self.assertEqual(batch_stock_total(self.db, self.tracked.id), 15)

    def test_plain_product_counter_moves(self):
        change = resolve_stock_delta(self.db, self.plain.id, -4)
        self.db.commit()

        self.assertEqual(change.stock_after, 6)
        self.assertIsNone(change.batch_id)
        self.assertEqual(self.db.get(Product, self.plain.id).stock, 6)

    def test_plain_product_cannot_go_negative(self):
        with self.assertRaises(InsufficientStock) as ctx:
            resolve_stock_delta(self.db, self.plain.id, -11)

        self.assertEqual(ctx.exception.requested, 11)
        self.assertEqual(ctx.exception.available, 10)
        self.assertEqual(self.plain.stock, 10)

    def test_batch_removal_updates_batch_and_product(self):
        change = resolve_stock_delta(self.db, self.tracked.id, -3, batch_id=self.b1.id)
        self.db.commit()

        self.assertEqual(change.batch_stock_after, 2)
        self.assertEqual(change.stock_after, 12)
        self.assertEqual(self.b1.current_stock, 2)
        self.assertEqual(self.b2.current_stock, 10)

    def test_batch_removal_beyond_batch_stock(self):
        with self.assertRaises(InsufficientStock) as ctx:
            resolve_stock_delta(self.db, self.tracked.id, -6, batch_id=self.b1.id)

        self.assertEqual(ctx.exception.batch_id, self.b1.id)
        self.assertEqual(ctx.exception.available, 5)

    def test_tracked_removal_requires_batch(self):
        with self.assertRaises(ValidationError):
            resolve_stock_delta(self.db, self.tracked.id, -1)

    def test_untracked_product_rejects_batch(self):
        with self.assertRaises(ValidationError):
            resolve_stock_delta(self.db, self.plain.id, -1, batch_id=self.b1.id)

    def test_batch_of_other_product_rejected(self):
        other = create_product(
            self.db,
            ProductCreate(
                name="Ibuprofen",
                is_batch_tracked=True,
                batches=[BatchCreate(batch_number="X1", quantity=3)],
            ),
        )
        with self.assertRaises(ValidationError):
            resolve_stock_delta(self.db, other.id, -1, batch_id=self.b1.id)

    def test_zero_delta_rejected(self):
        with self.assertRaises(ValidationError):
            resolve_stock_delta(self.db, self.plain.id, 0)

    def test_unknown_product(self):
        with self.assertRaises(ProductNotFound):
            resolve_stock_delta(self.db, 9999, 1)

    def test_receipt_with_known_number_merges_into_batch(self):
        change = resolve_stock_delta(
            self.db, self.tracked.id, 4, receipt=BatchReceipt(batch_number="B2")
        )
        self.db.commit()

        self.assertEqual(change.batch_id, self.b2.id)
        self.assertEqual(self.b2.initial_stock, 14)
        self.assertEqual(self.b2.current_stock, 14)
        self.assertEqual(self.tracked.stock, 19)

    def test_receipt_with_new_number_creates_batch(self):
        change = resolve_stock_delta(
            self.db,
            self.tracked.id,
            6,
            receipt=BatchReceipt(batch_number="B3", expiry_date=date(2028, 1, 1)),
        )
        self.db.commit()

        batch = self.db.get(ProductBatch, change.batch_id)
        self.assertEqual(batch.batch_number, "B3")
        self.assertEqual(batch.initial_stock, 6)
        self.assertEqual(self.tracked.stock, 21)

    def test_receipt_conflicting_with_batch_expiry_rejected(self):
        receipt = BatchReceipt(batch_number="B1", expiry_date=date(2027, 6, 30))

        with self.assertRaises(ValidationError):
            resolve_stock_delta(self.db, self.tracked.id, 4, receipt=receipt)

        self.assertEqual(self.b1.current_stock, 5)
        self.assertEqual(self.b1.expiry_date, date(2027, 1, 31))

    def test_receipt_conflicting_with_batch_price_rejected(self):
        receipt = BatchReceipt(batch_number="B1", buy_price=Decimal("12.50"))

        with self.assertRaises(ValidationError):
            resolve_stock_delta(self.db, self.tracked.id, 4, receipt=receipt)
        self.assertEqual(self.b1.initial_stock, 5)

    def test_matching_receipt_merges(self):
        receipt = BatchReceipt(
            batch_number="B1", expiry_date=date(2027, 1, 31), buy_price=self.b1.buy_price
        )

        change = resolve_stock_delta(self.db, self.tracked.id, 4, receipt=receipt)

        self.assertEqual(change.batch_id, self.b1.id)
        self.assertEqual(self.b1.current_stock, 9)

    def test_tracked_receipt_needs_batch_number(self):
        with self.assertRaises(ValidationError):
            resolve_stock_delta(self.db, self.tracked.id, 5)

    def test_adjust_stock_commits(self):
        adjust_stock(self.db, self.plain.id, 5)
        self.db.expire_all()

        self.assertEqual(self.db.get(Product, self.plain.id).stock, 15)

    def test_adjust_stock_failure_leaves_nothing(self):
        with self.assertRaises(InsufficientStock):
            adjust_stock(self.db, self.tracked.id, -20, batch_id=self.b2.id)
        self.db.expire_all()

        self.assertEqual(self.db.get(ProductBatch, self.b2.id).current_stock, 10)
        self.assertEqual(self.db.get(Product, self.tracked.id).stock, 15)


if __name__ == "__main__":
    unittest.main()
