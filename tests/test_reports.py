"""
Case-study reports against the shared May-July 2022 snapshot.
"""

from datetime import date
from decimal import Decimal

import pytest

from swiggy_analytics import reports


@pytest.mark.unit
class TestCustomerReports:

    def test_inactive_customers(self, store):
        result = reports.inactive_customers(store)
        assert result.column("name") == ["Neha", "Anupama"]

    def test_inactive_customers_with_null_user_in_orders(self, store, store_factory):
        orders = list(store.scan("orders"))
        orders.append({"order_id": 2001, "user_id": None, "r_id": 2, "date": date(2022, 7, 1), "amount": 99})
        polluted = store_factory(orders=orders)

        assert len(reports.inactive_customers(polluted)) == 0
        assert reports.inactive_customers_anti_join(polluted).column("user_id") == [5, 6]

    def test_customer_orders_in_range_is_inclusive(self, store):
        result = reports.customer_orders_in_range(store, 3, date(2022, 5, 1), date(2022, 5, 31))
        assert result.column("order_id") == [1007, 1008]
        assert result.column("f_name") == ["Non-veg Pizza", "Masala Dosa"]
        assert set(result.column("name")) == {"Vartika"}

    def test_repeat_customers(self, store):
        result = reports.repeat_customers(store)
        assert result.to_dicts() == [
            {"repeat_count": 2, "restaurant_name": "box8", "customer": "Ankit"},
            {"repeat_count": 2, "restaurant_name": "dominos", "customer": "Nitish"},
            {"repeat_count": 2, "restaurant_name": "dominos", "customer": "Vartika"},
            {"repeat_count": 2, "restaurant_name": "kfc", "customer": "Khushboo"},
        ]

    def test_favorite_food_keeps_ties(self, store):
        result = reports.favorite_food_per_customer(store)
        by_user = {}
        for row in result:
            by_user.setdefault(row["name"], []).append(row["f_name"])

        assert by_user["Nitish"] == ["Choco Lava cake", "Non-veg Pizza"]
        assert by_user["Khushboo"] == ["Chicken Wings"]
        assert by_user["Ankit"] == ["Rice Meal"]
        assert len(by_user["Vartika"]) == 4
        assert len(result) == 8

    def test_most_loyal_customers(self, store):
        result = reports.most_loyal_customers(store)
        assert [(r["r_name"], r["name"], r["ord_count"]) for r in result] == [
            ("dominos", "Nitish", 2),
            ("dominos", "Vartika", 2),
            ("kfc", "Khushboo", 2),
            ("box8", "Ankit", 2),
            ("Dosa Plaza", "Vartika", 1),
        ]


@pytest.mark.unit
class TestRestaurantReports:

    def test_average_dish_price(self, store, store_factory):
        assert round(reports.average_dish_price(store).scalar(), 2) == Decimal("267.57")
        assert reports.average_dish_price(store_factory(food=[])).scalar() is None

    def test_order_months_are_chronological(self, store):
        result = reports.distinct_order_months(store)
        assert result.column("month_name") == ["May", "June", "July"]
        assert result.column("order_count") == [4, 4, 3]

    def test_top_restaurant_per_month(self, store):
        result = reports.top_restaurant_per_month(store)
        assert [(r["month_name"], r["r_name"], r["total_orders"]) for r in result] == [
            ("May", "dominos", 2),
            ("June", "box8", 2),
            ("July", "dominos", 1),
            ("July", "kfc", 1),
            ("July", "box8", 1),
        ]

    def test_legacy_top_restaurants_mixes_months(self, store):
        result = reports.legacy_top_restaurants_by_month(store)
        assert [(r["r_name"], r["order_month"]) for r in result] == [
            ("dominos", "May"),
            ("box8", "June"),
            ("kfc", "May"),
        ]

    def test_top_restaurants_in_month(self, store):
        july = reports.top_restaurants_in_month(store, 2022, 7)
        assert july.column("r_name") == ["dominos", "kfc", "box8"]
        assert set(july.column("rnk")) == {1}

        may = reports.top_restaurants_in_month(store, 2022, 5, top=2)
        assert [(r["rnk"], r["r_name"]) for r in may] == [(1, "dominos"), (2, "kfc"), (2, "Dosa Plaza")]

    def test_top_restaurants_in_month_rejects_bad_month(self, store):
        with pytest.raises(ValueError):
            reports.top_restaurants_in_month(store, 2022, 13)

    def test_top_restaurant_overall(self, store, store_factory):
        assert reports.top_restaurant_overall(store).to_dicts() == [
            {"r_name": "dominos", "total_orders": 4}
        ]

        orders = list(store.scan("orders"))
        orders.append({"order_id": 1012, "user_id": 2, "r_id": 2, "date": date(2022, 7, 11), "amount": 300})
        tied = reports.top_restaurant_overall(store_factory(orders=orders))
        assert tied.column("r_name") == ["dominos", "kfc"]

    def test_restaurants_with_monthly_sales_above(self, store):
        default = reports.restaurants_with_monthly_sales_above(store)
        assert default.to_dicts() == [
            {"r_name": "dominos", "year": 2022, "month_name": "July", "total_sales": 1150}
        ]

        lower = reports.restaurants_with_monthly_sales_above(store, 900)
        assert lower.column("month_name") == ["May", "July"]

    def test_paired_foods(self, store):
        result = reports.frequently_paired_foods(store)
        assert [(r["food"], r["paired_with"], r["orders_together"]) for r in result] == [
            ("Non-veg Pizza", "Choco Lava cake", 2),
            ("Chicken Wings", "Chicken Popcorn", 1),
            ("Veg Pizza", "Choco Lava cake", 1),
        ]
        assert len(reports.frequently_paired_foods(store, min_orders=2)) == 1

    def test_paired_foods_skip_details_without_food(self, store, store_factory):
        details = list(store.scan("order_details"))
        details.append({"id": 99, "order_id": 1001, "f_id": None})
        result = reports.frequently_paired_foods(store_factory(order_details=details))
        assert [(r["food"], r["paired_with"], r["orders_together"]) for r in result] == [
            ("Non-veg Pizza", "Choco Lava cake", 2),
            ("Chicken Wings", "Chicken Popcorn", 1),
            ("Veg Pizza", "Choco Lava cake", 1),
        ]


@pytest.mark.unit
class TestRevenueGrowth:

    def test_monthly_revenue_growth(self, store):
        result = reports.monthly_revenue_growth(store)
        assert result.column("month_name") == ["May", "June", "July"]
        assert result.column("revenue") == [1480, 1506, 1593]
        assert result.column("growth") == [None, 26, 87]

    def test_restaurant_revenue_growth(self, store):
        result = reports.restaurant_monthly_revenue_growth(store)
        dominos = [r for r in result if r["r_id"] == 1]
        assert [(r["month_name"], r["total_revenue"], r["growth"]) for r in dominos] == [
            ("May", 1000, None),
            ("June", 550, -450),
            ("July", 1150, 600),
        ]
        dosa_plaza = [r for r in result if r["r_id"] == 4]
        assert dosa_plaza[0]["prev_revenue"] is None
        assert len(result) == 9

    def test_every_registered_report_runs(self, store):
        for slug, report in reports.REPORTS.items():
            result = report.run(store)
            assert result.columns, slug
