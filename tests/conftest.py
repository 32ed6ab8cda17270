"""
Shared fixtures: a small Swiggy-like snapshot covering May-July 2022.
"""

from datetime import date
from decimal import Decimal

import pytest

from swiggy_analytics.analytics import TableStore

USERS = [
    {"user_id": 1, "name": "Nitish"},
    {"user_id": 2, "name": "Khushboo"},
    {"user_id": 3, "name": "Vartika"},
    {"user_id": 4, "name": "Ankit"},
    {"user_id": 5, "name": "Neha"},
    {"user_id": 6, "name": "Anupama"},
]

RESTAURANTS = [
    {"r_id": 1, "r_name": "dominos", "cuisine": "Italian"},
    {"r_id": 2, "r_name": "kfc", "cuisine": "American"},
    {"r_id": 3, "r_name": "box8", "cuisine": "North Indian"},
    {"r_id": 4, "r_name": "Dosa Plaza", "cuisine": "South Indian"},
    {"r_id": 5, "r_name": "China Town", "cuisine": "Chinese"},
]

FOOD = [
    {"f_id": 1, "f_name": "Non-veg Pizza", "price": Decimal("450.00")},
    {"f_id": 2, "f_name": "Veg Pizza", "price": Decimal("400.00")},
    {"f_id": 3, "f_name": "Choco Lava cake", "price": Decimal("100.00")},
    {"f_id": 4, "f_name": "Chicken Wings", "price": Decimal("230.00")},
    {"f_id": 5, "f_name": "Chicken Popcorn", "price": Decimal("300.00")},
    {"f_id": 6, "f_name": "Rice Meal", "price": Decimal("213.00")},
    {"f_id": 7, "f_name": "Masala Dosa", "price": Decimal("180.00")},
]

ORDERS = [
    {"order_id": 1001, "user_id": 1, "r_id": 1, "date": date(2022, 5, 10), "amount": 550},
    {"order_id": 1002, "user_id": 1, "r_id": 2, "date": date(2022, 5, 26), "amount": 300},
    {"order_id": 1003, "user_id": 1, "r_id": 3, "date": date(2022, 6, 15), "amount": 213},
    {"order_id": 1004, "user_id": 1, "r_id": 1, "date": date(2022, 6, 29), "amount": 550},
    {"order_id": 1005, "user_id": 2, "r_id": 2, "date": date(2022, 6, 1), "amount": 530},
    {"order_id": 1006, "user_id": 2, "r_id": 2, "date": date(2022, 7, 10), "amount": 230},
    {"order_id": 1007, "user_id": 3, "r_id": 1, "date": date(2022, 5, 15), "amount": 450},
    {"order_id": 1008, "user_id": 3, "r_id": 4, "date": date(2022, 5, 31), "amount": 180},
    {"order_id": 1009, "user_id": 3, "r_id": 1, "date": date(2022, 7, 2), "amount": 1150},
    {"order_id": 1010, "user_id": 4, "r_id": 3, "date": date(2022, 6, 5), "amount": 213},
    {"order_id": 1011, "user_id": 4, "r_id": 3, "date": date(2022, 7, 20), "amount": 213},
]

ORDER_DETAILS = [
    {"id": 1, "order_id": 1001, "f_id": 1},
    {"id": 2, "order_id": 1001, "f_id": 3},
    {"id": 3, "order_id": 1002, "f_id": 5},
    {"id": 4, "order_id": 1003, "f_id": 6},
    {"id": 5, "order_id": 1004, "f_id": 1},
    {"id": 6, "order_id": 1004, "f_id": 3},
    {"id": 7, "order_id": 1005, "f_id": 4},
    {"id": 8, "order_id": 1005, "f_id": 5},
    {"id": 9, "order_id": 1006, "f_id": 4},
    {"id": 10, "order_id": 1007, "f_id": 1},
    {"id": 11, "order_id": 1008, "f_id": 7},
    {"id": 12, "order_id": 1009, "f_id": 2},
    {"id": 13, "order_id": 1009, "f_id": 3},
    {"id": 14, "order_id": 1010, "f_id": 6},
    {"id": 15, "order_id": 1011, "f_id": 6},
]


def build_store(**overrides) -> TableStore:
    tables = {
        "users": USERS,
        "restaurants": RESTAURANTS,
        "food": FOOD,
        "orders": ORDERS,
        "order_details": ORDER_DETAILS,
    }
    tables.update(overrides)
    return TableStore.swiggy(**tables)


@pytest.fixture
def store() -> TableStore:
    return build_store()


@pytest.fixture
def store_factory():
    """Builds a snapshot with some tables replaced, e.g. store_factory(food=[])."""
    return build_store
