from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import relationship

from shopledger.database.base import Base


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True)
    date = Column(DateTime(timezone=True), nullable=False)

    subtotal = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    tax = Column(Numeric(12, 2))
    total = Column(Numeric(12, 2), nullable=False)

    customer_id = Column(Integer, ForeignKey("customers.id"))
    payment_type = Column(String)
    due_amount = Column(Numeric(12, 2), nullable=False, default=0)

    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleItem.id",
    )

    __table_args__ = (
        Index("idx_sales_date", "date"),
        Index("idx_sales_customer_date", "customer_id", "date"),
    )


class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    batch_id = Column(Integer, ForeignKey("product_batches.id"))

    name = Column(String, nullable=False, default="")
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    item_discount = Column(Numeric(12, 2), nullable=False, default=0)
    scheme = Column(String)

    sale = relationship("Sale", back_populates="items")

    __table_args__ = (
        Index("idx_sale_items_product", "product_id"),
    )


__all__ = ["Sale", "SaleItem"]
