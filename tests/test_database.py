import unittest

from sqlalchemy import create_engine

from shopledger.database.engine import ensure_sqlite_schema

_LEGACY_BATCH_TABLE = (
    "CREATE TABLE product_batches ("
    "id INTEGER PRIMARY KEY, product_id INTEGER NOT NULL, batch_number VARCHAR NOT NULL)"
)


def _index_names(conn):
    rows = conn.exec_driver_sql("PRAGMA index_list('product_batches')").mappings()
    return {row["name"] for row in rows}


class EnsureSqliteSchemaTest(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine("sqlite:///:memory:")

    def tearDown(self):
        self.engine.dispose()

    def test_adds_unique_batch_index(self):
        with self.engine.begin() as conn:
            conn.exec_driver_sql(_LEGACY_BATCH_TABLE)

        ensure_sqlite_schema(bind=self.engine)
        ensure_sqlite_schema(bind=self.engine)

        with self.engine.connect() as conn:
            self.assertIn("uq_product_batches_product_number", _index_names(conn))

    def test_skips_index_when_duplicates_exist(self):
        with self.engine.begin() as conn:
            conn.exec_driver_sql(_LEGACY_BATCH_TABLE)
            conn.exec_driver_sql(
                "INSERT INTO product_batches (product_id, batch_number) VALUES (1, 'B1'), (1, 'B1')"
            )

        with self.assertLogs("shopledger.database.engine", level="WARNING"):
            ensure_sqlite_schema(bind=self.engine)

        with self.engine.connect() as conn:
            self.assertNotIn("uq_product_batches_product_number", _index_names(conn))

    def test_empty_database_is_left_alone(self):
        ensure_sqlite_schema(bind=self.engine)

        with self.engine.connect() as conn:
            tables = conn.exec_driver_sql("SELECT name FROM sqlite_master WHERE type = 'table'").all()
        self.assertEqual(tables, [])


if __name__ == "__main__":
    unittest.main()
