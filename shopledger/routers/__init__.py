from shopledger.routers.alerts import router as alerts_router
from shopledger.routers.categories import router as categories_router
from shopledger.routers.customers import router as customers_router
from shopledger.routers.expenses import router as expenses_router
from shopledger.routers.health import router as health_router
from shopledger.routers.maintenance import router as maintenance_router
from shopledger.routers.products import router as products_router
from shopledger.routers.purchases import router as purchases_router
from shopledger.routers.reports import router as reports_router
from shopledger.routers.sales import router as sales_router
from shopledger.routers.suppliers import router as suppliers_router

__all__ = [
    "alerts_router",
    "categories_router",
    "customers_router",
    "expenses_router",
    "health_router",
    "maintenance_router",
    "products_router",
    "purchases_router",
    "reports_router",
    "sales_router",
    "suppliers_router",
]
