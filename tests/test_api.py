"""
HTTP layer tests. The snapshot dependency is replaced with the test store,
so no database is needed.
"""

import pytest
from fastapi.testclient import TestClient

from swiggy_analytics.db.deps import get_snapshot
from swiggy_analytics.main import app
from swiggy_analytics.reports import REPORTS


@pytest.fixture
def client(store):
    app.dependency_overrides[get_snapshot] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.mark.api
class TestReportsApi:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["reports_available"] == len(REPORTS)

    def test_catalogue(self, client):
        response = client.get("/reports/")
        assert response.status_code == 200
        assert {r["slug"] for r in response.json()} == set(REPORTS)

    def test_report_by_slug(self, client):
        response = client.get("/reports/inactive-customers")
        assert response.status_code == 200
        body = response.json()
        assert body["columns"] == ["user_id", "name"]
        assert body["row_count"] == 2
        assert [r["name"] for r in body["rows"]] == ["Neha", "Anupama"]

    def test_unknown_report(self, client):
        response = client.get("/reports/does-not-exist")
        assert response.status_code == 404

    def test_monthly_revenue_growth_has_null_first_delta(self, client):
        body = client.get("/reports/monthly-revenue-growth").json()
        assert body["rows"][0]["growth"] is None
        assert body["rows"][1]["growth"] == 26

    def test_top_restaurants_in_month(self, client):
        response = client.get("/reports/top-restaurants-in-month", params={"year": 2022, "month": 7})
        assert response.status_code == 200
        assert [r["r_name"] for r in response.json()["rows"]] == ["dominos", "kfc", "box8"]

    def test_top_restaurants_in_month_validates_month(self, client):
        response = client.get("/reports/top-restaurants-in-month", params={"year": 2022, "month": 13})
        assert response.status_code == 422

    def test_monthly_sales_above_uses_default_threshold(self, client):
        body = client.get("/reports/monthly-sales-above").json()
        assert body["title"].endswith("1100")
        assert [r["r_name"] for r in body["rows"]] == ["dominos"]

    def test_customer_orders(self, client):
        response = client.get(
            "/reports/customer-orders",
            params={"user_id": 3, "date_from": "2022-05-01", "date_to": "2022-05-31"},
        )
        assert response.status_code == 200
        rows = response.json()["rows"]
        assert [r["order_id"] for r in rows] == [1007, 1008]
        assert rows[1]["date"] == "2022-05-31"

    def test_customer_orders_rejects_inverted_range(self, client):
        response = client.get(
            "/reports/customer-orders",
            params={"user_id": 3, "date_from": "2022-06-01", "date_to": "2022-05-01"},
        )
        assert response.status_code == 400

    def test_legacy_top_n(self, client):
        body = client.get("/reports/legacy-top-restaurants-by-month", params={"n": 1}).json()
        assert body["row_count"] == 1
        assert body["rows"][0]["r_name"] == "dominos"


@pytest.mark.api
class TestReportsApiWithIncompleteData:

    @pytest.fixture
    def client(self, store, store_factory):
        details = list(store.scan("order_details"))
        details.append({"id": 99, "order_id": 1001, "f_id": None})
        app.dependency_overrides[get_snapshot] = lambda: store_factory(order_details=details)
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_paired_foods_ignores_detail_without_food(self, client):
        response = client.get("/reports/paired-foods")
        assert response.status_code == 200
        assert response.json()["row_count"] == 3
