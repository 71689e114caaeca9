from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import relationship

from shopledger.database.base import Base


class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True)
    date = Column(DateTime(timezone=True), nullable=False)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"))

    grand_total = Column(Numeric(12, 2), nullable=False)
    paid_amount = Column(Numeric(12, 2), nullable=False, default=0)
    due_amount = Column(Numeric(12, 2), nullable=False, default=0)
    notes = Column(String)

    items = relationship(
        "PurchaseItem",
        back_populates="purchase",
        cascade="all, delete-orphan",
        order_by="PurchaseItem.id",
    )

    __table_args__ = (
        Index("idx_purchases_date", "date"),
        Index("idx_purchases_supplier_date", "supplier_id", "date"),
    )


class PurchaseItem(Base):
    __tablename__ = "purchase_items"

    id = Column(Integer, primary_key=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    batch_id = Column(Integer, ForeignKey("product_batches.id"))

    name = Column(String, nullable=False, default="")
    quantity = Column(Integer, nullable=False)
    buy_price = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)

    batch_number = Column(String)
    expiry_date = Column(Date)

    purchase = relationship("Purchase", back_populates="items")

    __table_args__ = (
        Index("idx_purchase_items_product", "product_id"),
    )


__all__ = ["Purchase", "PurchaseItem"]
