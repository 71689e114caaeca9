import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from shopledger.config import Settings, get_settings
from shopledger.core.logging import setup_logging
from shopledger.database import Base, engine, ensure_sqlite_schema
from shopledger.models import import_all_models
from shopledger.routers import (
    alerts_router,
    categories_router,
    customers_router,
    expenses_router,
    health_router,
    maintenance_router,
    products_router,
    purchases_router,
    reports_router,
    sales_router,
    suppliers_router,
)

setup_logging()
settings: Settings = get_settings()
logger = logging.getLogger(__name__)


def init_database() -> None:
    import_all_models()
    Base.metadata.create_all(bind=engine)
    ensure_sqlite_schema()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_database()
    logger.info("%s started (%s)", settings.APP_NAME, settings.ENVIRONMENT)
    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.include_router(health_router)
app.include_router(products_router)
app.include_router(categories_router)
app.include_router(sales_router)
app.include_router(purchases_router)
app.include_router(customers_router)
app.include_router(suppliers_router)
app.include_router(expenses_router)
app.include_router(alerts_router)
app.include_router(reports_router)
app.include_router(maintenance_router)


@app.get("/")
def root():
    return RedirectResponse(url="/docs", status_code=302)


__all__ = ["app", "init_database", "root"]
