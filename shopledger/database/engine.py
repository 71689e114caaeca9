import logging
import sqlite3

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.pool import StaticPool

from shopledger.config import Settings, get_settings


app_settings: Settings = get_settings()
logger = logging.getLogger(__name__)

_SQLITE_BUSY_TIMEOUT_SECONDS = 30
_SQLITE_BUSY_TIMEOUT_MS = _SQLITE_BUSY_TIMEOUT_SECONDS * 1000

_db_url = make_url(app_settings.DATABASE_URL)
is_sqlite = _db_url.get_backend_name() == "sqlite"
is_sqlite_memory = False
if is_sqlite:
    sqlite_db = _db_url.database
    is_sqlite_memory = sqlite_db in (None, "", ":memory:")
    if not is_sqlite_memory and _db_url.query.get("mode") == "memory":
        is_sqlite_memory = True

connect_args = {}
engine_kwargs: dict[str, object] = dict(pool_pre_ping=True)
if is_sqlite:
    connect_args = {"check_same_thread": False, "timeout": _SQLITE_BUSY_TIMEOUT_SECONDS}
    if is_sqlite_memory:
        engine_kwargs.update(poolclass=StaticPool)

engine = create_engine(
    app_settings.DATABASE_URL,
    connect_args=connect_args,
    **engine_kwargs,
)


def set_sqlite_pragmas(dbapi_connection, _connection_record):
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute(f"PRAGMA busy_timeout={_SQLITE_BUSY_TIMEOUT_MS}")
        if not is_sqlite_memory:
            try:
                cursor.execute("PRAGMA journal_mode=WAL")
                cursor.execute("PRAGMA synchronous=NORMAL")
            except sqlite3.DatabaseError:
                pass
    finally:
        cursor.close()


if is_sqlite:
    event.listen(engine, "connect", set_sqlite_pragmas)


def _escape_sqlite_identifier(value: str) -> str:
    return value.replace('"', '""')


def _get_sqlite_columns(conn, table_name: str):
    escaped_table = _escape_sqlite_identifier(table_name)
    # noinspection SqlNoDataSourceInspection
    result = conn.exec_driver_sql(
        f'PRAGMA table_info("{escaped_table}")'
    ).mappings()
    return {row["name"] for row in result}


def ensure_sqlite_schema(bind=None):
    """Add the unique batch-number index to a product_batches table that lacks it."""
    bind = bind or engine
    if bind.dialect.name != "sqlite":
        return
    with bind.begin() as conn:
        if not _get_sqlite_columns(conn, "product_batches"):
            return

        # noinspection SqlNoDataSourceInspection
        duplicate = conn.exec_driver_sql(
            "SELECT product_id, batch_number FROM product_batches "
            "GROUP BY product_id, batch_number HAVING COUNT(*) > 1 LIMIT 1"
        ).fetchone()
        if duplicate:
            logger.warning(
                "Skipping unique index on product_batches(product_id, batch_number) "
                "due to duplicates (product %s, batch %s).",
                duplicate[0],
                duplicate[1],
            )
        else:
            # noinspection SqlNoDataSourceInspection
            conn.exec_driver_sql(
                "CREATE UNIQUE INDEX IF NOT EXISTS "
                "uq_product_batches_product_number ON product_batches(product_id, batch_number)"
            )


__all__ = ["engine", "ensure_sqlite_schema", "is_sqlite", "set_sqlite_pragmas"]
