"""
Конвейер запросов.

``Query`` - неизменяемый список стадий, начиная с имени таблицы. Каждый метод
возвращает новый ``Query``; данные не читаются, пока ``execute(store)`` не
прогонит стадии по явно переданному снимку::

    top = (
        Query.from_("orders")
        .group_by({"r_id": "r_id"}, {"total_orders": count()})
        .join("restaurants", on="r_id", how="inner")
        .top_per_partition(None, "total_orders")
        .select("r_name", "total_orders")
    )
    result = top.execute(store)

Один и тот же запрос можно параллельно выполнять на любом числе снимков.
Колонки, на которые ссылаются стадии, проверяются по схеме до обработки строк,
поэтому опечатка ловится и на пустой таблице.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from . import window
from .aggregate import Aggregate, group_by as _group_by
from .columns import Extractor, as_extractor, referenced_columns
from .errors import AnalyticsError, TypeMismatch, UnknownColumn, UnorderedWindow
from .nulls import is_true, sql_in, sql_not_in
from .store import TableStore

logger = logging.getLogger(__name__)

JOIN_TYPES = ("inner", "left")

Columns = Tuple[str, ...]
Rows = List[Dict[str, Any]]
StageFn = Callable[[Columns, Rows, TableStore], Tuple[Columns, Rows]]


@dataclass(frozen=True)
class Result:
    """Упорядоченные строки результата с именованными колонками."""

    columns: Columns
    rows: Tuple[Dict[str, Any], ...]

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return iter(self.rows)

    def column(self, name: str) -> List[Any]:
        if name not in self.columns:
            raise UnknownColumn(name, self.columns)
        return [row[name] for row in self.rows]

    def scalar(self) -> Any:
        if len(self.rows) != 1 or len(self.columns) != 1:
            raise AnalyticsError(
                f"scalar() needs exactly one row and one column, got {len(self.rows)}x{len(self.columns)}"
            )
        return self.rows[0][self.columns[0]]

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [{c: row[c] for c in self.columns} for row in self.rows]


@dataclass(frozen=True)
class _Stage:
    name: str
    run: StageFn


def _require(columns: Columns, *names: str) -> None:
    for name in names:
        if name not in columns:
            raise UnknownColumn(name, columns)


def _require_refs(columns: Columns, *keys) -> None:
    for key in keys:
        _require(columns, *referenced_columns(key))


def _source_of(source, store: TableStore) -> Tuple[Columns, Rows, str]:
    if isinstance(source, Query):
        result = source.execute(store)
        return result.columns, [dict(r) for r in result.rows], source.source
    table = store.table(source)
    return tuple(table.column_names), [dict(r) for r in table.rows], source


class Query:
    def __init__(self, source: str, stages: Sequence[_Stage] = ()):
        self.source = source
        self._stages: Tuple[_Stage, ...] = tuple(stages)

    @classmethod
    def from_(cls, table: str) -> "Query":
        return cls(table)

    def _then(self, name: str, run: StageFn) -> "Query":
        return Query(self.source, self._stages + (_Stage(name, run),))

    def __repr__(self) -> str:
        return f"Query({self.source!r}, stages={[s.name for s in self._stages]})"

    # ------------------------------------------------------------------
    # выполнение

    def execute(self, store: TableStore) -> Result:
        columns, rows, _ = _source_of(self.source, store)
        for stage in self._stages:
            columns, rows = stage.run(columns, rows, store)
            logger.debug("%s -> %s: %d rows", self.source, stage.name, len(rows))
        return Result(columns=tuple(columns), rows=tuple(rows))

    # ------------------------------------------------------------------
    # реляционные стадии

    def join(
        self,
        right: Union[str, "Query"],
        *,
        on: Union[str, Tuple[str, str]],
        how: str,
        alias: Optional[str] = None,
    ) -> "Query":
        """
        Соединение по равенству с таблицей или подзапросом.

        ``how`` обязателен: ``"inner"`` отбрасывает левые строки без пары,
        ``"left"`` оставляет их с None в правых колонках. ``on`` - общее имя
        колонки или пара ``(left_column, right_column)``. NULL-ключи не
        совпадают ни с чем. Правая колонка с уже занятым именем получает имя
        ``"<alias>.<column>"``.
        """
        if how not in JOIN_TYPES:
            raise ValueError(f"Unsupported join type: {how!r} (expected one of {JOIN_TYPES})")
        left_key, right_key = (on, on) if isinstance(on, str) else on

        def run(columns, rows, store):
            right_columns, right_rows, right_name = _source_of(right, store)
            prefix = alias or right_name
            _require(columns, left_key)
            _require(right_columns, right_key)

            mapping = []
            out_columns = list(columns)
            for c in right_columns:
                if c == right_key and left_key == right_key:
                    continue
                target = f"{prefix}.{c}" if c in out_columns else c
                out_columns.append(target)
                mapping.append((c, target))

            index: Dict[Any, List[Dict[str, Any]]] = {}
            for r in right_rows:
                if r[right_key] is not None:
                    index.setdefault(r[right_key], []).append(r)

            out = []
            for row in rows:
                matches = index.get(row[left_key], []) if row[left_key] is not None else []
                for match in matches:
                    merged = dict(row)
                    merged.update({target: match[c] for c, target in mapping})
                    out.append(merged)
                if not matches and how == "left":
                    merged = dict(row)
                    merged.update({target: None for _, target in mapping})
                    out.append(merged)
            return tuple(out_columns), out

        return self._then(f"{how} join {right if isinstance(right, str) else right.source}", run)

    def where(self, predicate: Extractor) -> "Query":
        """Оставляет строки, где предикат True; False и UNKNOWN (None) отбрасываются."""

        def run(columns, rows, store):
            _require_refs(columns, predicate)
            return columns, [r for r in rows if is_true(predicate(r))]

        return self._then("where", run)

    def _membership(self, name: str, column: str, values, negate: bool) -> "Query":
        test = sql_not_in if negate else sql_in
        if not isinstance(values, Query):
            values = tuple(values)

        def run(columns, rows, store):
            _require(columns, column)
            if isinstance(values, Query):
                result = values.execute(store)
                if len(result.columns) != 1:
                    raise AnalyticsError(f"{name} subquery must return one column, got {result.columns}")
                candidates = tuple(result.column(result.columns[0]))
            else:
                candidates = values
            return columns, [r for r in rows if is_true(test(r[column], candidates))]

        return self._then(name, run)

    def where_in(self, column: str, values) -> "Query":
        return self._membership("where_in", column, values, negate=False)

    def where_not_in(self, column: str, values) -> "Query":
        """
        ``column NOT IN (values)`` с семантикой NULL из SQL.

        ``values`` - подзапрос из одной колонки или итерируемое. Если среди
        значений есть None, не проходит ни одна строка; для анти-соединения без
        учёта NULL-ключей - left join плюс ``is_null``.
        """
        return self._membership("where_not_in", column, values, negate=True)

    def group_by(self, keys: Optional[Mapping[str, Any]], aggregates: Mapping[str, Aggregate]) -> "Query":
        def run(columns, rows, store):
            _require_refs(columns, *(keys or {}).values())
            for aggregate in aggregates.values():
                _require(columns, *aggregate.columns)
            out_columns = tuple(keys or {}) + tuple(aggregates)
            return out_columns, _group_by(rows, keys, aggregates)

        return self._then("group_by", run)

    def having(self, predicate: Extractor) -> "Query":
        def run(columns, rows, store):
            _require_refs(columns, predicate)
            return columns, [r for r in rows if is_true(predicate(r))]

        return self._then("having", run)

    # ------------------------------------------------------------------
    # оконные стадии

    def dense_rank(self, partition_by, order_by, descending: bool = True, name: str = "rnk") -> "Query":
        def run(columns, rows, store):
            _require_refs(columns, partition_by, order_by)
            return _add(columns, name), window.dense_rank(rows, partition_by, order_by, descending, name)

        return self._then("dense_rank", run)

    def partition_max(self, partition_by, value, name: str = "partition_max") -> "Query":
        def run(columns, rows, store):
            _require_refs(columns, partition_by, value)
            return _add(columns, name), window.partition_max(rows, partition_by, value, name)

        return self._then("partition_max", run)

    def partition_count(self, partition_by, name: str = "partition_count") -> "Query":
        def run(columns, rows, store):
            _require_refs(columns, partition_by)
            return _add(columns, name), window.partition_count(rows, partition_by, name)

        return self._then("partition_count", run)

    def lag(self, partition_by, order_by, value, name: str = "prev", offset: int = 1) -> "Query":
        if order_by is None:
            raise UnorderedWindow("LAG requires an explicit ORDER BY inside the window")

        def run(columns, rows, store):
            _require_refs(columns, partition_by, order_by, value)
            return _add(columns, name), window.lag(rows, partition_by, order_by, value, name, offset)

        return self._then("lag", run)

    def top_per_partition(self, partition_by, order_by, descending: bool = True) -> "Query":
        def run(columns, rows, store):
            _require_refs(columns, partition_by, order_by)
            return columns, window.top_per_partition(rows, partition_by, order_by, descending)

        return self._then("top_per_partition", run)

    def legacy_limit_top_n(self, order_by, n: int, descending: bool = True) -> "Query":
        """Глобальный ORDER BY + LIMIT, ничьи разрешаются порядком строк. См. ``window.legacy_limit_top_n``."""

        def run(columns, rows, store):
            _require_refs(columns, order_by)
            return columns, window.legacy_limit_top_n(rows, order_by, n, descending)

        return self._then("legacy_limit_top_n", run)

    # ------------------------------------------------------------------
    # проекция и сортировка

    def with_column(self, name: str, extractor: Extractor) -> "Query":
        def run(columns, rows, store):
            _require_refs(columns, extractor)
            out = []
            for r in rows:
                r = dict(r)
                r[name] = extractor(r)
                out.append(r)
            return _add(columns, name), out

        return self._then(f"with_column {name}", run)

    def select(self, *names: str, **renamed) -> "Query":
        """Проекция на ``names`` и ``renamed`` (``new_name=column_or_extractor``)."""

        def run(columns, rows, store):
            _require(columns, *names)
            _require_refs(columns, *renamed.values())
            extractors = [(n, as_extractor(n)) for n in names]
            extractors += [(n, as_extractor(s)) for n, s in renamed.items()]
            out = [{n: fn(r) for n, fn in extractors} for r in rows]
            return tuple(n for n, _ in extractors), out

        return self._then("select", run)

    def distinct(self) -> "Query":
        def run(columns, rows, store):
            seen = set()
            out = []
            for r in rows:
                key = tuple(r[c] for c in columns)
                if key not in seen:
                    seen.add(key)
                    out.append(r)
            return columns, out

        return self._then("distinct", run)

    def order_by(self, *keys, descending: Union[bool, Sequence[bool]] = False) -> "Query":
        """
        Устойчивая сортировка по нескольким ключам. ``descending`` - один флаг
        на все ключи или по флагу на ключ. NULL первым по возрастанию и
        последним по убыванию.
        """
        if not keys:
            raise ValueError("order_by needs at least one key")
        flags = [descending] * len(keys) if isinstance(descending, bool) else list(descending)
        if len(flags) != len(keys):
            raise ValueError("descending must be a bool or have one flag per key")

        def run(columns, rows, store):
            _require_refs(columns, *keys)
            out = list(rows)
            for key, desc in reversed(list(zip(keys, flags))):
                fn = as_extractor(key)
                try:
                    out.sort(key=lambda r: window.sort_key(fn(r)), reverse=desc)
                except TypeError as e:
                    raise TypeMismatch(f"ORDER BY values are not comparable: {e}") from e
            return columns, out

        return self._then("order_by", run)

    def limit(self, n: int, offset: int = 0) -> "Query":
        if n < 0 or offset < 0:
            raise ValueError("limit and offset must be non-negative")

        def run(columns, rows, store):
            return columns, rows[offset:offset + n]

        return self._then("limit", run)


def _add(columns: Columns, name: str) -> Columns:
    return tuple(columns) if name in columns else tuple(columns) + (name,)
