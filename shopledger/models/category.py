from sqlalchemy import Column, ForeignKey, Index, Integer, String

from shopledger.database.base import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    parent_id = Column(Integer, ForeignKey("categories.id"))
    description = Column(String)

    __table_args__ = (
        Index("idx_categories_parent", "parent_id"),
    )


__all__ = ["Category"]
