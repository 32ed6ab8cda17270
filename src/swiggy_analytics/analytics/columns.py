"""
Извлечение значений из строк.

Экстрактор - любой callable, который принимает строку и возвращает значение.
``col`` читает колонку и падает, если её нет; функции для дат повторяют
``YEAR()``, ``MONTH()`` и ``MONTHNAME()`` из MySQL.

``month_label`` нужен только для вывода: названия месяцев сортируются по
алфавиту (April, August, December, ...), поэтому хронология берётся из
``month_order`` или из пары ``(year_of, month_number)``.

Экстракторы, собранные здесь, помнят, какие колонки читают (атрибут
``columns``), чтобы запрос мог проверить схему ещё до первой строки.
"""

import calendar
from typing import Any, Callable, Mapping, Tuple

from .errors import UnknownColumn

Extractor = Callable[[Mapping[str, Any]], Any]


class col:
    """Значение именованной колонки."""

    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    @property
    def columns(self) -> Tuple[str, ...]:
        return (self.name,)

    def __call__(self, row: Mapping[str, Any]) -> Any:
        try:
            return row[self.name]
        except KeyError:
            raise UnknownColumn(self.name, list(row)) from None

    def __repr__(self) -> str:
        return f"col({self.name!r})"


def as_extractor(key) -> Extractor:
    if isinstance(key, str):
        return col(key)
    if callable(key):
        return key
    raise TypeError(f"Expected a column name or a callable, got {key!r}")


def referenced_columns(key) -> Tuple[str, ...]:
    """
    Колонки, которые читает ключ: имя, экстрактор или список из них.
    Для произвольной lambda колонки неизвестны - возвращается пустой кортеж.
    """
    if key is None:
        return ()
    if isinstance(key, str):
        return (key,)
    if isinstance(key, (list, tuple)):
        return tuple(name for k in key for name in referenced_columns(k))
    return tuple(getattr(key, "columns", ()))


def _reads(extractor, *sources):
    extractor.columns = referenced_columns(list(sources))
    return extractor


def _date_part(column: str, part: Callable) -> Extractor:
    source = col(column)

    def extract(row):
        value = source(row)
        return None if value is None else part(value)

    return _reads(extract, source)


def year_of(column: str = "date") -> Extractor:
    return _date_part(column, lambda d: d.year)


def month_number(column: str = "date") -> Extractor:
    return _date_part(column, lambda d: d.month)


def month_label(column: str = "date") -> Extractor:
    """Название месяца для вывода, например ``"June"``."""
    return _date_part(column, lambda d: calendar.month_name[d.month])


def month_order(column: str = "date") -> Extractor:
    """Номер месяца для хронологии: ``year * 12 + month - 1``."""
    return _date_part(column, lambda d: d.year * 12 + d.month - 1)


# Предикаты возвращают True, False или None (UNKNOWN), как сравнения в SQL

def _compare(column, op: Callable[[Any, Any], bool], value: Any) -> Extractor:
    source = as_extractor(column)

    def predicate(row):
        left = source(row)
        if left is None or value is None:
            return None
        return op(left, value)

    return _reads(predicate, source)


def _compare_columns(left, op: Callable[[Any, Any], bool], right) -> Extractor:
    left_fn, right_fn = as_extractor(left), as_extractor(right)

    def predicate(row):
        a, b = left_fn(row), right_fn(row)
        if a is None or b is None:
            return None
        return op(a, b)

    return _reads(predicate, left_fn, right_fn)


def eq(column, value: Any) -> Extractor:
    return _compare(column, lambda a, b: a == b, value)


def gt(column, value: Any) -> Extractor:
    return _compare(column, lambda a, b: a > b, value)


def ge(column, value: Any) -> Extractor:
    return _compare(column, lambda a, b: a >= b, value)


def lt(column, value: Any) -> Extractor:
    return _compare(column, lambda a, b: a < b, value)


def lt_column(left, right) -> Extractor:
    """``left < right`` для двух колонок одной строки; NULL с любой стороны даёт UNKNOWN."""
    return _compare_columns(left, lambda a, b: a < b, right)


def between(column, low: Any, high: Any) -> Extractor:
    """``column BETWEEN low AND high`` (границы включительно)."""
    source = as_extractor(column)

    def predicate(row):
        value = source(row)
        if value is None or low is None or high is None:
            return None
        return low <= value <= high

    return _reads(predicate, source)


def is_null(column) -> Extractor:
    source = as_extractor(column)

    def predicate(row):
        return source(row) is None

    return _reads(predicate, source)
