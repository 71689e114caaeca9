from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, Integer, Numeric, String

from shopledger.database.base import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=False, default="")
    address = Column(String)
    notes = Column(String)

    # Positive: customer owes the shop. Negative: advance held for the customer.
    current_balance = Column(Numeric(12, 2), nullable=False, default=0)
    opening_balance = Column(Numeric(12, 2), nullable=False, default=0)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_customers_name", "name"),
        Index("idx_customers_phone", "phone"),
    )


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=False, default="")
    address = Column(String)
    notes = Column(String)

    # Positive: shop owes the supplier. Negative: shop holds supplier credit.
    current_balance = Column(Numeric(12, 2), nullable=False, default=0)
    opening_balance = Column(Numeric(12, 2), nullable=False, default=0)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_suppliers_name", "name"),
        Index("idx_suppliers_phone", "phone"),
    )


__all__ = ["Customer", "Supplier"]
