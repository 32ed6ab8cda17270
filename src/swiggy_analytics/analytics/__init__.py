from .aggregate import Aggregate, avg, count, count_distinct, group_by, max_, min_, sum_
from .columns import (
    between,
    col,
    eq,
    ge,
    gt,
    is_null,
    lt,
    lt_column,
    month_label,
    month_number,
    month_order,
    year_of,
)
from .errors import AnalyticsError, TypeMismatch, UnknownColumn, UnknownTable, UnorderedWindow
from .nulls import ABSENT, UNKNOWN, null_sub, sql_in, sql_not_in
from .query import Query, Result
from .store import ColumnKind, Table, TableStore

__all__ = [
    "Aggregate",
    "avg",
    "count",
    "count_distinct",
    "group_by",
    "max_",
    "min_",
    "sum_",
    "between",
    "col",
    "eq",
    "ge",
    "gt",
    "is_null",
    "lt",
    "lt_column",
    "month_label",
    "month_number",
    "month_order",
    "year_of",
    "AnalyticsError",
    "TypeMismatch",
    "UnknownColumn",
    "UnknownTable",
    "UnorderedWindow",
    "ABSENT",
    "UNKNOWN",
    "null_sub",
    "sql_in",
    "sql_not_in",
    "Query",
    "Result",
    "ColumnKind",
    "Table",
    "TableStore",
]
