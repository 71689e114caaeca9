import unittest
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shopledger.database.base import Base
from shopledger.dependencies import get_db
from shopledger.main import app


class LedgerApiTest(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(bind=self.engine)
        Session = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

        def override_get_db():
            db = Session()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        self.engine.dispose()

    def _post(self, url, payload, expected=201):
        response = self.client.post(url, json=payload)
        self.assertEqual(response.status_code, expected, response.text)
        return response.json()

    def test_health(self):
        response = self.client.get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["database"], "ok")

    def test_credit_sale_payment_and_ledger(self):
        product = self._post("/products", {"name": "Lentils 1kg", "stock": 20, "sell_price": "140"})
        customer = self._post("/customers", {"name": "Hasan", "phone": "01555000000"})

        sale = self._post(
            "/sales",
            {
                "items": [{"product_id": product["id"], "quantity": 5, "price": "100"}],
                "subtotal": "500",
                "total": "500",
                "customer_id": customer["id"],
                "payment_type": "credit",
                "due_amount": "500",
            },
        )
        self.assertEqual(len(sale["items"]), 1)

        self._post(
            f"/customers/{customer['id']}/payments",
            {"amount": "200"},
        )

        balance = self.client.get(f"/customers/{customer['id']}").json()["current_balance"]
        self.assertEqual(Decimal(balance), Decimal("300"))

        ledger = self.client.get(f"/customers/{customer['id']}/ledger").json()
        self.assertEqual([entry["kind"] for entry in ledger["entries"]], ["payment", "sale"])
        self.assertEqual(Decimal(ledger["entries"][0]["balance"]), Decimal("300"))
        self.assertEqual(Decimal(ledger["computed_balance"]), Decimal("300"))

        stock = self.client.get(f"/products/{product['id']}").json()["stock"]
        self.assertEqual(stock, 15)

    def test_insufficient_stock_is_conflict(self):
        product = self._post("/products", {"name": "Matches", "stock": 1})

        response = self.client.post(
            "/sales",
            json={
                "items": [{"product_id": product["id"], "quantity": 3, "price": "5"}],
                "subtotal": "15",
                "total": "15",
            },
        )

        self.assertEqual(response.status_code, 409)
        detail = response.json()["detail"]
        self.assertEqual(detail["product_id"], product["id"])
        self.assertEqual(detail["requested"], 3)
        self.assertEqual(detail["available"], 1)
        self.assertEqual(self.client.get("/sales").json(), [])

    def test_validation_and_not_found_errors(self):
        self.assertEqual(self.client.get("/customers/77/ledger").status_code, 404)
        self.assertEqual(self.client.get("/products/77").status_code, 404)

        response = self.client.post(
            "/sales",
            json={
                "items": [{"product_id": 77, "quantity": 1, "price": "5"}],
                "subtotal": "5",
                "total": "5",
            },
        )
        self.assertEqual(response.status_code, 404)

        supplier = self._post("/suppliers", {"name": "Meghna"})
        response = self.client.post(
            f"/suppliers/{supplier['id']}/payments",
            json={"amount": "0"},
        )
        self.assertEqual(response.status_code, 400)

    def test_batch_product_purchase_and_alerts(self):
        product = self._post(
            "/products",
            {
                "name": "Amoxicillin",
                "reorder_level": 2,
                "is_batch_tracked": True,
                "batches": [{"batch_number": "AM-1", "quantity": 2, "expiry_date": "2026-01-05"}],
            },
        )
        self.assertEqual(product["stock"], 2)
        self.assertEqual(len(product["batches"]), 1)

        supplier = self._post("/suppliers", {"name": "Renata"})
        purchase = self._post(
            "/purchases",
            {
                "supplier_id": supplier["id"],
                "grand_total": "900",
                "paid_amount": "300",
                "items": [
                    {
                        "product_id": product["id"],
                        "quantity": 9,
                        "buy_price": "100",
                        "batch_number": "AM-2",
                        "expiry_date": "2027-01-05",
                    }
                ],
            },
        )
        self.assertEqual(Decimal(purchase["due_amount"]), Decimal("600"))

        ledger = self.client.get(f"/suppliers/{supplier['id']}/ledger").json()
        self.assertEqual([entry["kind"] for entry in ledger["entries"]], ["supplier_payment", "purchase"])
        self.assertEqual(Decimal(ledger["current_balance"]), Decimal("600"))

        batches = self.client.get(f"/products/{product['id']}/batches").json()
        self.assertEqual([batch["batch_number"] for batch in batches], ["AM-1", "AM-2"])

        alerts = self.client.get("/alerts/stock", params={"today": "2026-01-01", "horizon_days": 10}).json()
        self.assertEqual([alert["type"] for alert in alerts], ["expiry"])
        self.assertEqual(alerts[0]["batch_number"], "AM-1")

    def test_stock_adjustment_needs_batch_for_tracked_product(self):
        product = self._post(
            "/products",
            {
                "name": "Inhaler",
                "is_batch_tracked": True,
                "batches": [{"batch_number": "IH-1", "quantity": 4}],
            },
        )

        response = self.client.post(f"/products/{product['id']}/stock-adjustments", json={"delta": -1})
        self.assertEqual(response.status_code, 400)

        batch_id = product["batches"][0]["id"]
        adjusted = self._post(
            f"/products/{product['id']}/stock-adjustments",
            {"delta": -1, "batch_id": batch_id},
            expected=200,
        )
        self.assertEqual(adjusted["stock"], 3)
        self.assertEqual(adjusted["batches"][0]["current_stock"], 3)

    def test_reconcile_endpoint(self):
        self._post("/customers", {"name": "Opening", "opening_balance": "120"})

        result = self._post("/maintenance/reconcile", {}, expected=200)

        self.assertEqual(result["drift_count"], 0)
        self.assertEqual(result["drifts"], [])

    def test_categories_and_expenses(self):
        category = self._post("/categories", {"name": "Dairy"})
        self.assertEqual(self.client.delete(f"/categories/{category['id']}").status_code, 204)
        self.assertEqual(self.client.get("/categories").json(), [])

        expense = self._post("/expenses", {"category": "Transport", "amount": "350"})
        self.assertEqual(Decimal(expense["amount"]), Decimal("350"))
        self.assertEqual(self.client.delete(f"/expenses/{expense['id']}").status_code, 204)
        self.assertEqual(self.client.delete(f"/expenses/{expense['id']}").status_code, 400)

    def test_payment_party_comes_from_path(self):
        first = self._post("/customers", {"name": "Hasan", "opening_balance": "500"})
        second = self._post("/customers", {"name": "Jalal", "opening_balance": "500"})

        payment = self._post(
            f"/customers/{first['id']}/payments",
            {"customer_id": second["id"], "amount": "120"},
        )

        self.assertEqual(payment["customer_id"], first["id"])
        balances = [
            Decimal(self.client.get(f"/customers/{party['id']}").json()["current_balance"])
            for party in (first, second)
        ]
        self.assertEqual(balances, [Decimal("380"), Decimal("500")])

        response = self.client.post("/suppliers/55/payments", json={"amount": "10"})
        self.assertEqual(response.status_code, 404)

    def test_product_patch_rejects_null_required_fields(self):
        product = self._post("/products", {"name": "Ghee", "stock": 3, "reorder_level": 2})

        for field in ("name", "reorder_level", "buy_price", "sell_price", "discount_percent"):
            response = self.client.patch(f"/products/{product['id']}", json={field: None})
            self.assertEqual(response.status_code, 400, field)

        updated = self.client.patch(f"/products/{product['id']}", json={"reorder_level": 5}).json()
        self.assertEqual(updated["reorder_level"], 5)
        self.assertEqual(updated["name"], "Ghee")

    def test_party_edit_and_delete(self):
        supplier = self._post("/suppliers", {"name": "Meghna", "opening_balance": "900"})
        customer = self._post("/customers", {"name": "Hasan"})

        edited = self.client.patch(
            f"/suppliers/{supplier['id']}",
            json={"phone": "01811111111", "current_balance": "0"},
        )
        self.assertEqual(edited.status_code, 200, edited.text)
        self.assertEqual(edited.json()["phone"], "01811111111")
        self.assertEqual(Decimal(edited.json()["current_balance"]), Decimal("900"))

        self._post(f"/suppliers/{supplier['id']}/payments", {"amount": "100"})
        self.assertEqual(self.client.delete(f"/suppliers/{supplier['id']}").status_code, 400)

        self.assertEqual(self.client.delete(f"/customers/{customer['id']}").status_code, 204)
        self.assertEqual(self.client.get(f"/customers/{customer['id']}").status_code, 404)
        self.assertEqual(self.client.delete(f"/customers/{customer['id']}").status_code, 404)

    def test_category_and_expense_edits(self):
        category = self._post("/categories", {"name": "Dairy"})
        product = self._post("/products", {"name": "Milk", "category_id": category["id"]})

        renamed = self.client.patch(f"/categories/{category['id']}", json={"name": "Dairy & Eggs"})
        self.assertEqual(renamed.status_code, 200, renamed.text)
        self.assertEqual(self.client.get(f"/products/{product['id']}").json()["category"], "Dairy & Eggs")

        expense = self._post("/expenses", {"category": "Transport", "amount": "350"})
        edited = self.client.patch(f"/expenses/{expense['id']}", json={"amount": "420", "description": "Van"})
        self.assertEqual(edited.status_code, 200, edited.text)
        self.assertEqual(Decimal(edited.json()["amount"]), Decimal("420"))
        self.assertEqual(edited.json()["description"], "Van")
        self.assertEqual(self.client.patch(f"/expenses/{expense['id']}", json={"amount": "-5"}).status_code, 400)

    def test_sales_summary(self):
        product = self._post("/products", {"name": "Lentils 1kg", "stock": 20})
        self._post(
            "/sales",
            {
                "items": [{"product_id": product["id"], "quantity": 2, "price": "140"}],
                "subtotal": "280",
                "total": "280",
                "date": "2026-03-03T09:30:00+06:00",
            },
        )

        summary = self.client.get("/reports/sales-summary", params={"today": "2026-03-03"}).json()

        self.assertEqual(Decimal(summary["today_total"]), Decimal("280"))
        self.assertEqual(summary["today_count"], 1)
        self.assertEqual(Decimal(summary["month_total"]), Decimal("280"))
        self.assertEqual(len(summary["trend"]), 7)
        self.assertEqual(summary["trend"][-1]["day"], "2026-03-03")
        self.assertEqual(summary["top_products"][0]["name"], "Lentils 1kg")


if __name__ == "__main__":
    unittest.main()
