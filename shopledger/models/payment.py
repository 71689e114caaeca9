from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String

from shopledger.database.base import Base


class Payment(Base):
    """Customer-facing cash movement: ``received`` or ``given``."""

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    type = Column(String(20), nullable=False)
    notes = Column(String)

    __table_args__ = (
        Index("idx_payments_customer_date", "customer_id", "date"),
        Index("idx_payments_type", "type"),
    )


class SupplierPayment(Base):
    """Supplier-facing cash movement: ``paid`` or ``received_refund``."""

    __tablename__ = "supplier_payments"

    id = Column(Integer, primary_key=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False)
    purchase_id = Column(Integer, ForeignKey("purchases.id"))
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    type = Column(String(20), nullable=False)
    notes = Column(String)

    __table_args__ = (
        Index("idx_supplier_payments_supplier_date", "supplier_id", "date"),
    )


__all__ = ["Payment", "SupplierPayment"]
