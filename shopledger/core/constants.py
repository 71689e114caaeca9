PARTY_CUSTOMER = "customer"
PARTY_SUPPLIER = "supplier"
PARTY_TYPES = (PARTY_CUSTOMER, PARTY_SUPPLIER)

# Customer payments
PAYMENT_RECEIVED = "received"
PAYMENT_GIVEN = "given"
CUSTOMER_PAYMENT_TYPES = (PAYMENT_RECEIVED, PAYMENT_GIVEN)

# Supplier payments
SUPPLIER_PAID = "paid"
SUPPLIER_REFUND = "received_refund"
SUPPLIER_PAYMENT_TYPES = (SUPPLIER_PAID, SUPPLIER_REFUND)

SALE_PAYMENT_TYPES = ("cash", "credit", "card", "mobile")
EXPENSE_PAYMENT_METHODS = ("cash", "card", "mobile", "bank_transfer")

ALERT_LOW_STOCK = "low_stock"
ALERT_EXPIRY = "expiry"

UNCATEGORIZED = "Uncategorized"
