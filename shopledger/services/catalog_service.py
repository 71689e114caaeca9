import logging

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from shopledger.core.constants import EXPENSE_PAYMENT_METHODS, UNCATEGORIZED
from shopledger.core.dates import utc_or_now
from shopledger.core.errors import ValidationError
from shopledger.core.money import ZERO, to_money
from shopledger.database.session import transaction
from shopledger.models.category import Category
from shopledger.models.expense import Expense
from shopledger.models.product import Product
from shopledger.schemas.catalog import CategoryCreate, CategoryUpdate, ExpenseCreate, ExpenseUpdate

logger = logging.getLogger(__name__)

_EXPENSE_REQUIRED_FIELDS = ("category", "amount", "payment_method", "date")


def _expense_amount(value):
    try:
        amount = to_money(value)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc
    if amount <= ZERO:
        raise ValidationError("Expense amount must be greater than zero.")
    return amount


def _require_category(db: Session, category_id: int) -> Category:
    category = db.get(Category, category_id)
    if category is None:
        raise ValidationError(f"Category {category_id} not found.")
    return category


def create_category(db: Session, payload: CategoryCreate) -> Category:
    name = (payload.name or "").strip()
    if not name:
        raise ValidationError("Category name is required.")
    if payload.parent_id is not None and db.get(Category, payload.parent_id) is None:
        raise ValidationError(f"Parent category {payload.parent_id} not found.")

    category = Category(name=name, parent_id=payload.parent_id, description=payload.description)
    with transaction(db):
        db.add(category)
        db.flush()
    return category


def list_categories(db: Session) -> list[Category]:
    return list(db.execute(select(Category).order_by(Category.name, Category.id)).scalars().all())


def update_category(db: Session, category_id: int, payload: CategoryUpdate) -> Category:
    """Rename or re-parent a category; linked products pick up the new name."""
    category = _require_category(db, category_id)
    changes = payload.model_dump(exclude_unset=True)

    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationError("Category name is required.")
        changes["name"] = name
    parent_id = changes.get("parent_id")
    if parent_id is not None:
        # Walk up from the new parent; meeting this category means a cycle.
        ancestor = _require_category(db, parent_id)
        while ancestor is not None:
            if ancestor.id == category_id:
                raise ValidationError(f"Category {category_id} cannot be nested under itself.")
            ancestor = db.get(Category, ancestor.parent_id) if ancestor.parent_id else None

    with transaction(db):
        for key, value in changes.items():
            setattr(category, key, value)
        if "name" in changes:
            db.execute(
                update(Product)
                .where(Product.category_id == category_id)
                .values(category=category.name)
                .execution_options(synchronize_session="fetch")
            )

    return category


def delete_category(db: Session, category_id: int) -> None:
    """Remove a leaf category; its products fall back to uncategorized."""
    category = _require_category(db, category_id)
    children = db.execute(
        select(func.count(Category.id)).where(Category.parent_id == category_id)
    ).scalar_one()
    if children:
        raise ValidationError(f"Category {category_id} has {children} sub-categories.")

    with transaction(db):
        db.execute(
            update(Product)
            .where(Product.category_id == category_id)
            .values(category_id=None, category=UNCATEGORIZED)
            .execution_options(synchronize_session="fetch")
        )
        db.delete(category)

    logger.info("Deleted category %s", category_id)


def add_expense(db: Session, payload: ExpenseCreate) -> Expense:
    category = (payload.category or "").strip()
    if not category:
        raise ValidationError("Expense category is required.")
    if payload.payment_method not in EXPENSE_PAYMENT_METHODS:
        raise ValidationError(f"Unknown payment method: {payload.payment_method!r}")
    amount = _expense_amount(payload.amount)

    expense = Expense(
        date=utc_or_now(payload.date),
        category=category,
        amount=amount,
        description=payload.description,
        payment_method=payload.payment_method,
    )
    with transaction(db):
        db.add(expense)
        db.flush()
    return expense


def list_expenses(db: Session, category: str | None = None, limit: int = 200) -> list[Expense]:
    stmt = select(Expense).order_by(Expense.date.desc(), Expense.id.desc())
    if category:
        stmt = stmt.where(Expense.category == category)
    return list(db.execute(stmt.limit(limit)).scalars().all())


def update_expense(db: Session, expense_id: int, payload: ExpenseUpdate) -> Expense:
    expense = db.get(Expense, expense_id)
    if expense is None:
        raise ValidationError(f"Expense {expense_id} not found.")
    changes = payload.model_dump(exclude_unset=True)

    for key in _EXPENSE_REQUIRED_FIELDS:
        if key in changes and changes[key] is None:
            raise ValidationError(f"{key} cannot be cleared.")
    if "category" in changes:
        category = changes["category"].strip()
        if not category:
            raise ValidationError("Expense category is required.")
        changes["category"] = category
    if "payment_method" in changes and changes["payment_method"] not in EXPENSE_PAYMENT_METHODS:
        raise ValidationError(f"Unknown payment method: {changes['payment_method']!r}")
    if "amount" in changes:
        changes["amount"] = _expense_amount(changes["amount"])
    if "date" in changes:
        changes["date"] = utc_or_now(changes["date"])

    with transaction(db):
        for key, value in changes.items():
            setattr(expense, key, value)
    return expense


def delete_expense(db: Session, expense_id: int) -> None:
    expense = db.get(Expense, expense_id)
    if expense is None:
        raise ValidationError(f"Expense {expense_id} not found.")
    with transaction(db):
        db.delete(expense)


__all__ = [
    "add_expense",
    "create_category",
    "delete_category",
    "delete_expense",
    "list_categories",
    "list_expenses",
    "update_category",
    "update_expense",
]
