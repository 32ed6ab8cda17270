"""
NULL и логика трёх значений.

SQL NULL - это ``None`` (экспортируется как ``ABSENT``); он не равен ни нулю,
ни пустой строке. Истинность как в SQL: ``True``, ``False`` или ``UNKNOWN``
(тоже ``None``). Фильтр оставляет строку, только если предикат ровно ``True``.
"""

from typing import Any, Iterable, Optional

ABSENT = None
UNKNOWN = None


def is_absent(value: Any) -> bool:
    return value is None


def sql_in(value: Any, candidates: Iterable[Any]) -> Optional[bool]:
    """
    ``value IN (candidates)``.

    True при совпадении; UNKNOWN, если совпадения нет, но значение или один из
    кандидатов NULL; иначе False.
    """
    if value is None:
        return UNKNOWN
    saw_absent = False
    for candidate in candidates:
        if candidate is None:
            saw_absent = True
        elif candidate == value:
            return True
    return UNKNOWN if saw_absent else False


def sql_not_in(value: Any, candidates: Iterable[Any]) -> Optional[bool]:
    """
    ``value NOT IN (candidates)``.

    Один NULL среди кандидатов делает UNKNOWN каждую строку без совпадения,
    так что фильтр отбрасывает все строки.
    """
    return sql_not(sql_in(value, candidates))


def sql_not(value: Optional[bool]) -> Optional[bool]:
    if value is None:
        return UNKNOWN
    return not value


def sql_and(left: Optional[bool], right: Optional[bool]) -> Optional[bool]:
    if left is False or right is False:
        return False
    if left is None or right is None:
        return UNKNOWN
    return True


def sql_or(left: Optional[bool], right: Optional[bool]) -> Optional[bool]:
    if left is True or right is True:
        return True
    if left is None or right is None:
        return UNKNOWN
    return False


def sql_eq(left: Any, right: Any) -> Optional[bool]:
    if left is None or right is None:
        return UNKNOWN
    return left == right


def null_sub(left: Any, right: Any) -> Any:
    if left is None or right is None:
        return ABSENT
    return left - right


def null_add(left: Any, right: Any) -> Any:
    if left is None or right is None:
        return ABSENT
    return left + right


def is_true(value: Optional[bool]) -> bool:
    """Три значения -> фильтр: UNKNOWN отбрасывается."""
    return value is True
