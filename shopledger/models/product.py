from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)

from shopledger.database.base import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(String)
    brand = Column(String)
    ean = Column(String)
    scheme = Column(String)

    category = Column(String, nullable=False, default="Uncategorized")
    category_id = Column(Integer, ForeignKey("categories.id"))

    buy_price = Column(Numeric(12, 2), nullable=False, default=0)
    sell_price = Column(Numeric(12, 2), nullable=False, default=0)
    discount_percent = Column(Numeric(5, 2), nullable=False, default=0)

    # Authoritative only when not batch tracked; otherwise the batch sum.
    stock = Column(Integer, nullable=False, default=0)
    reorder_level = Column(Integer, nullable=False, default=0)

    is_batch_tracked = Column(Boolean, nullable=False, default=False)
    expiry_date = Column(Date)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        Index("idx_products_name", "name"),
        Index("idx_products_category", "category_id"),
        Index("idx_products_ean", "ean"),
    )


class ProductBatch(Base):
    __tablename__ = "product_batches"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"))

    batch_number = Column(String, nullable=False)
    lot_number = Column(String)
    expiry_date = Column(Date)
    purchase_date = Column(Date, nullable=False)

    initial_stock = Column(Integer, nullable=False)
    current_stock = Column(Integer, nullable=False)
    buy_price = Column(Numeric(12, 2), nullable=False, default=0)
    notes = Column(String)

    __table_args__ = (
        UniqueConstraint("product_id", "batch_number", name="uq_product_batches_product_number"),
        CheckConstraint(
            "current_stock >= 0 AND current_stock <= initial_stock",
            name="ck_product_batches_current_stock",
        ),
        Index("idx_batches_product_expiry", "product_id", "expiry_date"),
    )


__all__ = ["Product", "ProductBatch"]
