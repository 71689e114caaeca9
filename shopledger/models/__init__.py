import importlib

from shopledger.models.category import Category
from shopledger.models.expense import Expense
from shopledger.models.party import Customer, Supplier
from shopledger.models.payment import Payment, SupplierPayment
from shopledger.models.product import Product, ProductBatch
from shopledger.models.purchase import Purchase, PurchaseItem
from shopledger.models.sale import Sale, SaleItem


def import_all_models() -> None:
    for module_name in (
        "shopledger.models.category",
        "shopledger.models.expense",
        "shopledger.models.party",
        "shopledger.models.payment",
        "shopledger.models.product",
        "shopledger.models.purchase",
        "shopledger.models.sale",
    ):
        importlib.import_module(module_name)


__all__ = [
    "Category",
    "Customer",
    "Expense",
    "Payment",
    "Product",
    "ProductBatch",
    "Purchase",
    "PurchaseItem",
    "Sale",
    "SaleItem",
    "Supplier",
    "SupplierPayment",
    "import_all_models",
]
