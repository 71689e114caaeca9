from shopledger.services.alert_service import scan_stock_alerts
from shopledger.services.balance_service import apply_customer_payment, apply_supplier_payment
from shopledger.services.ledger_service import (
    get_party_ledger,
    reconcile_batch_stock,
    reconcile_party_balances,
)
from shopledger.services.party_service import create_customer, create_supplier
from shopledger.services.report_service import sales_summary
from shopledger.services.product_service import create_product, get_batches_by_product, get_product
from shopledger.services.purchase_service import apply_purchase
from shopledger.services.sales_service import apply_sale
from shopledger.services.stock_service import adjust_stock, resolve_stock_delta

__all__ = [
    "adjust_stock",
    "apply_customer_payment",
    "apply_purchase",
    "apply_sale",
    "apply_supplier_payment",
    "create_customer",
    "create_product",
    "create_supplier",
    "get_batches_by_product",
    "get_party_ledger",
    "get_product",
    "reconcile_batch_stock",
    "reconcile_party_balances",
    "resolve_stock_delta",
    "sales_summary",
    "scan_stock_alerts",
]
