from shopledger.database.base import Base
from shopledger.database.engine import engine, ensure_sqlite_schema
from shopledger.database.session import SessionLocal, get_db, transaction

__all__ = ["Base", "engine", "ensure_sqlite_schema", "SessionLocal", "get_db", "transaction"]
