"""
Оконные функции над разбитыми на партиции строками.

Каждая функция возвращает новые dict-строки в исходном порядке с одной
добавленной колонкой. ``partition_by``: ``None`` (одна партиция на все строки),
имя колонки, экстрактор или список из них.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence

from .columns import as_extractor
from .errors import TypeMismatch, UnorderedWindow

logger = logging.getLogger(__name__)


def sort_key(value: Any) -> tuple:
    """NULL идёт первым при сортировке по возрастанию и последним по убыванию."""
    return (0,) if value is None else (1, value)


def _key_fn(keys) -> Callable[[Mapping[str, Any]], tuple]:
    if keys is None:
        return lambda row: ()
    if isinstance(keys, (list, tuple)):
        fns = [as_extractor(k) for k in keys]
    else:
        fns = [as_extractor(keys)]
    return lambda row: tuple(fn(row) for fn in fns)


def _order_fn(order_by) -> Callable[[Mapping[str, Any]], tuple]:
    key = _key_fn(order_by)
    return lambda row: tuple(sort_key(v) for v in key(row))


def _partitions(rows: Sequence[Mapping[str, Any]], partition_by) -> Dict[tuple, List[int]]:
    key = _key_fn(partition_by)
    parts: Dict[tuple, List[int]] = {}
    for i, row in enumerate(rows):
        parts.setdefault(key(row), []).append(i)
    return parts


def _sorted_positions(rows, positions: List[int], order_by, descending: bool) -> List[int]:
    order_value = _order_fn(order_by)
    try:
        return sorted(positions, key=lambda i: order_value(rows[i]), reverse=descending)
    except TypeError as e:
        raise TypeMismatch(f"Window order key values are not comparable: {e}") from e


def dense_rank(
    rows: Iterable[Mapping[str, Any]],
    partition_by,
    order_by,
    descending: bool = True,
    name: str = "rnk",
) -> List[Dict[str, Any]]:
    """DENSE_RANK() OVER (PARTITION BY ... ORDER BY ...): равные значения делят ранг, без пропусков."""
    rows = list(rows)
    order_value = _order_fn(order_by)
    out = [dict(r) for r in rows]

    for positions in _partitions(rows, partition_by).values():
        try:
            distinct_keys = sorted({order_value(rows[i]) for i in positions}, reverse=descending)
        except TypeError as e:
            raise TypeMismatch(f"Window order key values are not comparable: {e}") from e
        ranks = {k: n for n, k in enumerate(distinct_keys, start=1)}
        for i in positions:
            out[i][name] = ranks[order_value(rows[i])]
    return out


def partition_max(
    rows: Iterable[Mapping[str, Any]],
    partition_by,
    value,
    name: str = "partition_max",
) -> List[Dict[str, Any]]:
    """MAX(value) OVER (PARTITION BY ...), значение копируется в каждую строку партиции."""
    rows = list(rows)
    value_fn = as_extractor(value)
    out = [dict(r) for r in rows]

    for positions in _partitions(rows, partition_by).values():
        values = [v for v in (value_fn(rows[i]) for i in positions) if v is not None]
        try:
            peak = max(values) if values else None
        except TypeError as e:
            raise TypeMismatch(f"MAX over incomparable values: {e}") from e
        for i in positions:
            out[i][name] = peak
    return out


def partition_count(
    rows: Iterable[Mapping[str, Any]],
    partition_by,
    name: str = "partition_count",
) -> List[Dict[str, Any]]:
    """COUNT(*) OVER (PARTITION BY ...)."""
    rows = list(rows)
    out = [dict(r) for r in rows]
    for positions in _partitions(rows, partition_by).values():
        for i in positions:
            out[i][name] = len(positions)
    return out


def lag(
    rows: Iterable[Mapping[str, Any]],
    partition_by,
    order_by,
    value,
    name: str = "prev",
    offset: int = 1,
) -> List[Dict[str, Any]]:
    """
    LAG(value, offset) OVER (PARTITION BY ... ORDER BY ...).

    Порядок обязателен и должен быть строгим внутри партиции: без него
    "предыдущая строка" зависит от порядка хранения. Отсутствующий ``order_by``
    и повтор ключа порядка в партиции дают ``UnorderedWindow``. Первые
    ``offset`` строк каждой партиции получают ``None``.
    """
    if order_by is None:
        raise UnorderedWindow("LAG requires an explicit ORDER BY inside the window")
    if offset < 1:
        raise ValueError("offset must be a positive integer")

    rows = list(rows)
    order_key = _key_fn(order_by)
    value_fn = as_extractor(value)
    out = [dict(r) for r in rows]

    for part_key, positions in _partitions(rows, partition_by).items():
        ordered = _sorted_positions(rows, positions, order_by, descending=False)
        seen = set()
        for i in ordered:
            k = order_key(rows[i])
            if k in seen:
                raise UnorderedWindow(
                    f"Order key {k!r} is not unique in partition {part_key!r}; LAG would be non-deterministic"
                )
            seen.add(k)
        for pos, i in enumerate(ordered):
            out[i][name] = value_fn(rows[ordered[pos - offset]]) if pos >= offset else None
    return out


def top_per_partition(
    rows: Iterable[Mapping[str, Any]],
    partition_by,
    order_by,
    descending: bool = True,
) -> List[Dict[str, Any]]:
    """
    Лучшие строки каждой партиции с сохранением ничьих: все строки с dense rank 1.

    Основной способ ответить на вопрос "лучший X для каждого Y".
    """
    rank_column = "__rank"
    ranked = dense_rank(rows, partition_by, order_by, descending=descending, name=rank_column)
    result = []
    for row in ranked:
        if row.pop(rank_column) == 1:
            result.append(row)
    return result


def legacy_limit_top_n(
    rows: Iterable[Mapping[str, Any]],
    order_by,
    n: int,
    descending: bool = True,
) -> List[Dict[str, Any]]:
    """
    ORDER BY ... LIMIT n по всем строкам, без учёта партиций.

    При равенстве побеждает строка, пришедшая раньше; одна группа может занять
    несколько мест, а другая ни одного. Только для воспроизведения старых
    отчётов; для ответа по группам - ``top_per_partition``.
    """
    rows = [dict(r) for r in rows]
    # sorted() стабилен и с reverse=True: ничьи сохраняют входной порядок
    positions = _sorted_positions(rows, list(range(len(rows))), order_by, descending)
    logger.debug("legacy_limit_top_n: keeping %d of %d rows", min(n, len(rows)), len(rows))
    return [rows[i] for i in positions[:n]]
