from sqlalchemy import Column, DateTime, Index, Integer, Numeric, String

from shopledger.database.base import Base


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True)
    date = Column(DateTime(timezone=True), nullable=False)
    category = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(String)
    payment_method = Column(String(20), nullable=False, default="cash")

    __table_args__ = (
        Index("idx_expenses_date", "date"),
        Index("idx_expenses_category", "category"),
    )


__all__ = ["Expense"]
