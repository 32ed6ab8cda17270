from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict

from swiggy_analytics.analytics import (
    Query,
    Result,
    TableStore,
    avg,
    between,
    count,
    count_distinct,
    eq,
    ge,
    gt,
    is_null,
    lt_column,
    month_label,
    month_number,
    null_sub,
    sum_,
    year_of,
)
from swiggy_analytics.analytics.nulls import sql_eq

DEFAULT_SALES_THRESHOLD = 1100
LEGACY_TOP_N = 3

# Группировка по месяцу: ключи для хронологии (year, month) + подпись month_name
MONTH_KEYS = {
    "year": year_of("date"),
    "month": month_number("date"),
    "month_name": month_label("date"),
}


def _restaurant_order_counts(by_month: bool) -> Query:
    keys = {"r_id": "r_id"}
    if by_month:
        keys.update(MONTH_KEYS)
    return (
        Query.from_("orders")
        .group_by(keys, {"total_orders": count()})
        .join("restaurants", on="r_id", how="inner")
    )


def inactive_customers(store: TableStore) -> Result:
    """
    Клиенты без заказов: users.user_id NOT IN (SELECT DISTINCT user_id FROM orders).
    Если в orders.user_id есть NULL, результат пустой (логика трёх значений SQL).
    """
    ordered = Query.from_("orders").select("user_id").distinct()
    return (
        Query.from_("users")
        .where_not_in("user_id", ordered)
        .order_by("user_id")
        .execute(store)
    )


def inactive_customers_anti_join(store: TableStore) -> Result:
    """
    Клиенты без заказов через LEFT JOIN ... IS NULL.
    NULL в orders.user_id не влияет на результат.
    """
    ordered = Query.from_("orders").select(customer_id="user_id").distinct()
    return (
        Query.from_("users")
        .join(ordered, on=("user_id", "customer_id"), how="left")
        .where(is_null("customer_id"))
        .select("user_id", "name")
        .order_by("user_id")
        .execute(store)
    )


def average_dish_price(store: TableStore) -> Result:
    """
    Средняя цена блюда по меню. На пустом меню avg_price = None, а не 0.
    """
    return Query.from_("menu").group_by(None, {"avg_price": avg("price")}).execute(store)


def distinct_order_months(store: TableStore) -> Result:
    """
    Месяцы, в которых были заказы, в хронологическом порядке (год, номер месяца),
    а не по алфавиту названий.
    """
    return (
        Query.from_("orders")
        .where(lambda row: row["date"] is not None)
        .group_by(MONTH_KEYS, {"order_count": count()})
        .order_by("year", "month")
        .execute(store)
    )


def top_restaurant_per_month(store: TableStore) -> Result:
    """
    Лидер по количеству заказов в каждом месяце.
    DENSE_RANK по (year, month): при равенстве возвращаются все лидеры.
    """
    return (
        _restaurant_order_counts(by_month=True)
        .top_per_partition(["year", "month"], "total_orders")
        .order_by("year", "month", "r_id")
        .select("year", "month", "month_name", "r_id", "r_name", "total_orders")
        .execute(store)
    )


def legacy_top_restaurants_by_month(store: TableStore, n: int = LEGACY_TOP_N) -> Result:
    """
    Воспроизводит исходный запрос: GROUP BY r_id, MONTHNAME(date) ... LIMIT n.
    Это топ-n по всем месяцам сразу, а не по каждому месяцу; при равенстве
    выбор строки произвольный. Для ответа "по месяцам" см. top_restaurant_per_month.
    """
    return (
        Query.from_("orders")
        .group_by({"r_id": "r_id", "order_month": month_label("date")}, {"total_orders": count()})
        .join("restaurants", on="r_id", how="inner")
        .legacy_limit_top_n("total_orders", n)
        .select("r_id", "r_name", "total_orders", "order_month")
        .execute(store)
    )


def top_restaurants_in_month(store: TableStore, year: int, month: int, top: int = 1) -> Result:
    """
    Рестораны с наибольшим числом заказов в заданном месяце.
    top - сколько мест рейтинга вернуть (DENSE_RANK <= top, с учётом равенства).
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    return (
        Query.from_("orders")
        .where(eq(year_of("date"), year))
        .where(eq(month_number("date"), month))
        .group_by({"r_id": "r_id"}, {"total_orders": count()})
        .join("restaurants", on="r_id", how="inner")
        .dense_rank(None, "total_orders", name="rnk")
        .having(lambda row: row["rnk"] <= top)
        .order_by("rnk", "r_id")
        .select("rnk", "r_id", "r_name", "total_orders")
        .execute(store)
    )


def top_restaurant_overall(store: TableStore) -> Result:
    """
    Ресторан(ы) с максимальным числом заказов за всё время (все при равенстве).
    """
    return (
        _restaurant_order_counts(by_month=False)
        .top_per_partition(None, "total_orders")
        .order_by("r_name")
        .select("r_name", "total_orders")
        .execute(store)
    )


def restaurants_with_monthly_sales_above(
    store: TableStore,
    threshold=DEFAULT_SALES_THRESHOLD,
) -> Result:
    """
    Рестораны с выручкой за месяц больше threshold, с указанием месяца.
    """
    return (
        Query.from_("orders")
        .group_by({"r_id": "r_id", **MONTH_KEYS}, {"total_sales": sum_("amount")})
        .having(gt("total_sales", threshold))
        .join("restaurants", on="r_id", how="inner")
        .order_by("year", "month", "r_name")
        .select("r_name", "year", "month_name", "total_sales")
        .execute(store)
    )


def customer_orders_in_range(store: TableStore, user_id: int, date_from: date, date_to: date) -> Result:
    """
    Все заказы клиента с позициями за период (границы включительно).
    """
    return (
        Query.from_("orders")
        .join("order_details", on="order_id", how="inner")
        .join("users", on="user_id", how="inner")
        .where(eq("user_id", user_id))
        .where(between("date", date_from, date_to))
        .join("food", on="f_id", how="inner")
        .order_by("date", "order_id", "f_id")
        .select("order_id", "date", "amount", "name", "f_id", "f_name")
        .execute(store)
    )


def repeat_customers(store: TableStore) -> Result:
    """
    Клиенты, заказывавшие в одном ресторане больше одного раза.
    """
    return (
        Query.from_("orders")
        .group_by({"r_id": "r_id", "user_id": "user_id"}, {"repeat_count": count()})
        .having(gt("repeat_count", 1))
        .join("restaurants", on="r_id", how="inner")
        .join("users", on="user_id", how="inner")
        .order_by("repeat_count", "r_name", "name", descending=[True, False, False])
        .select("repeat_count", restaurant_name="r_name", customer="name")
        .execute(store)
    )


def monthly_revenue_growth(store: TableStore) -> Result:
    """
    Выручка по месяцам и прирост к предыдущему месяцу.
    LAG с явным ORDER BY (year, month); у первого месяца growth = None.
    """
    return (
        Query.from_("orders")
        .group_by(MONTH_KEYS, {"revenue": sum_("amount")})
        .lag(None, ["year", "month"], "revenue", name="prev_revenue")
        .with_column("growth", lambda row: null_sub(row["revenue"], row["prev_revenue"]))
        .order_by("year", "month")
        .execute(store)
    )


def favorite_food_per_customer(store: TableStore) -> Result:
    """
    Любимое блюдо каждого клиента (чаще всего заказанное), все при равенстве.
    """
    return (
        Query.from_("orders")
        .join("order_details", on="order_id", how="inner")
        .join("food", on="f_id", how="inner")
        .join("users", on="user_id", how="inner")
        .partition_count(["user_id", "f_id"], name="f_count")
        .top_per_partition("user_id", "f_count")
        .select("user_id", "name", "f_name", "f_count")
        .distinct()
        .order_by("user_id", "f_name")
        .execute(store)
    )


def most_loyal_customers(store: TableStore) -> Result:
    """
    Самые лояльные клиенты каждого ресторана: максимум различных заказов.
    MAX() OVER (PARTITION BY r_id), при равенстве возвращаются все клиенты.
    """
    return (
        Query.from_("orders")
        .join("order_details", on="order_id", how="inner")
        .join("users", on="user_id", how="inner")
        .join("restaurants", on="r_id", how="inner")
        .group_by(
            {"r_id": "r_id", "r_name": "r_name", "user_id": "user_id", "name": "name"},
            {"ord_count": count_distinct("order_id")},
        )
        .partition_max("r_id", "ord_count", name="max_ord_count")
        .where(lambda row: sql_eq(row["ord_count"], row["max_ord_count"]))
        .order_by("r_id", "user_id")
        .select("r_id", "r_name", "name", "ord_count")
        .execute(store)
    )


def restaurant_monthly_revenue_growth(store: TableStore) -> Result:
    """
    Помесячная выручка каждого ресторана и прирост к предыдущему месяцу.
    """
    return (
        Query.from_("orders")
        .join("restaurants", on="r_id", how="inner")
        .group_by({"r_id": "r_id", "r_name": "r_name", **MONTH_KEYS}, {"total_revenue": sum_("amount")})
        .lag("r_id", ["year", "month"], "total_revenue", name="prev_revenue")
        .with_column("growth", lambda row: null_sub(row["total_revenue"], row["prev_revenue"]))
        .order_by("r_id", "year", "month")
        .execute(store)
    )


def frequently_paired_foods(store: TableStore, min_orders: int = 1) -> Result:
    """
    Пары блюд, которые заказывают вместе (в одном заказе).
    orders_together - количество различных заказов с обоими блюдами.
    """
    return (
        Query.from_("order_details")
        .join("order_details", on="order_id", how="inner", alias="pair")
        .where(lt_column("f_id", "pair.f_id"))
        .group_by(
            {"f_id": "f_id", "paired_f_id": "pair.f_id"},
            {"orders_together": count_distinct("order_id")},
        )
        .having(ge("orders_together", min_orders))
        .join("food", on="f_id", how="inner")
        .join("food", on=("paired_f_id", "f_id"), how="inner", alias="paired")
        .order_by("orders_together", "f_name", "paired.f_name", descending=[True, False, False])
        .select("orders_together", food="f_name", paired_with="paired.f_name")
        .execute(store)
    )


@dataclass(frozen=True)
class Report:
    title: str
    run: Callable[[TableStore], Result]


REPORTS: Dict[str, Report] = {
    "inactive-customers": Report("Customers who have never ordered", inactive_customers),
    "inactive-customers-anti-join": Report(
        "Customers who have never ordered (anti-join)", inactive_customers_anti_join
    ),
    "average-dish-price": Report("Average price per dish", average_dish_price),
    "order-months": Report("Months with orders", distinct_order_months),
    "top-restaurant-per-month": Report("Top restaurant by orders for every month", top_restaurant_per_month),
    "legacy-top-restaurants-by-month": Report(
        "Top restaurants by monthly orders (legacy LIMIT)", legacy_top_restaurants_by_month
    ),
    "top-restaurant-overall": Report("Top restaurant overall", top_restaurant_overall),
    "repeat-customers": Report("Customers ordering repeatedly from a restaurant", repeat_customers),
    "monthly-revenue-growth": Report("Month over month revenue growth", monthly_revenue_growth),
    "favorite-food": Report("Favourite food per customer", favorite_food_per_customer),
    "loyal-customers": Report("Most loyal customers per restaurant", most_loyal_customers),
    "restaurant-revenue-growth": Report(
        "Month over month revenue growth per restaurant", restaurant_monthly_revenue_growth
    ),
    "paired-foods": Report("Dishes ordered together", frequently_paired_foods),
}
