import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .columns import Extractor, as_extractor, referenced_columns
from .errors import TypeMismatch

logger = logging.getLogger(__name__)

COUNT = "count"
COUNT_DISTINCT = "count_distinct"
SUM = "sum"
AVG = "avg"
MAX = "max"
MIN = "min"


@dataclass(frozen=True)
class Aggregate:
    kind: str
    source: Optional[Extractor] = None

    @property
    def columns(self) -> Tuple[str, ...]:
        """Колонки-источники агрегата; у COUNT(*) их нет."""
        return referenced_columns(self.source)

    def compute(self, rows: List[Mapping[str, Any]]) -> Any:
        if self.source is None:
            # COUNT(*)
            return len(rows)

        values = [v for v in (self.source(r) for r in rows) if v is not None]

        if self.kind == COUNT:
            return len(values)
        if self.kind == COUNT_DISTINCT:
            return len(set(values))
        if self.kind in (SUM, AVG):
            total = _numeric_sum(values, self.kind)
            if total is None or self.kind == SUM:
                return total
            return total / len(values)
        if self.kind in (MAX, MIN):
            if not values:
                return None
            try:
                return max(values) if self.kind == MAX else min(values)
            except TypeError as e:
                raise TypeMismatch(f"{self.kind.upper()} over incomparable values: {e}") from e
        raise ValueError(f"Unsupported aggregate: {self.kind}")


def _numeric_sum(values: List[Any], kind: str):
    if not values:
        return None
    for v in values:
        if isinstance(v, bool) or not isinstance(v, (int, float, Decimal)):
            raise TypeMismatch(f"{kind.upper()} needs numeric values, got {type(v).__name__} {v!r}")
    total = values[0]
    try:
        for v in values[1:]:
            total = total + v
    except TypeError as e:
        raise TypeMismatch(f"{kind.upper()} over mixed numeric types: {e}") from e
    return total


def count(column=None) -> Aggregate:
    """``COUNT(*)`` без колонки, ``COUNT(column)`` (только не-NULL значения) с колонкой."""
    if column is None:
        return Aggregate(COUNT)
    return Aggregate(COUNT, as_extractor(column))


def count_distinct(column) -> Aggregate:
    return Aggregate(COUNT_DISTINCT, as_extractor(column))


def sum_(column) -> Aggregate:
    return Aggregate(SUM, as_extractor(column))


def avg(column) -> Aggregate:
    return Aggregate(AVG, as_extractor(column))


def max_(column) -> Aggregate:
    return Aggregate(MAX, as_extractor(column))


def min_(column) -> Aggregate:
    return Aggregate(MIN, as_extractor(column))


def group_by(
    rows: Iterable[Mapping[str, Any]],
    keys: Optional[Mapping[str, Any]],
    aggregates: Mapping[str, Aggregate],
) -> List[Dict[str, Any]]:
    """
    Группировка строк и подсчёт агрегатов.

    ``keys`` - выходное имя -> колонка или экстрактор. Группы идут в порядке
    первого появления. Без ключей весь вход - одна группа, поэтому пустой вход
    даёт одну строку (COUNT = 0, остальные None). С ключами пустой вход даёт
    пустой результат.
    """
    rows = list(rows)
    key_fns = {name: as_extractor(k) for name, k in (keys or {}).items()}

    groups: Dict[tuple, List[Mapping[str, Any]]] = {}
    if key_fns:
        for row in rows:
            group_key = tuple(fn(row) for fn in key_fns.values())
            groups.setdefault(group_key, []).append(row)
    else:
        groups[()] = rows

    result = []
    for group_key, members in groups.items():
        out = dict(zip(key_fns, group_key))
        for name, aggregate in aggregates.items():
            out[name] = aggregate.compute(members)
        result.append(out)

    logger.debug("group_by: %d rows -> %d groups", len(rows), len(result))
    return result
