import enum
import logging
from datetime import date, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import AnalyticsError, TypeMismatch, UnknownColumn, UnknownTable

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]


class ColumnKind(str, enum.Enum):
    integer = "integer"
    text = "text"
    numeric = "numeric"
    date = "date"


def _matches(kind: ColumnKind, value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if kind is ColumnKind.integer:
        return isinstance(value, int)
    if kind is ColumnKind.numeric:
        return isinstance(value, (int, float, Decimal))
    if kind is ColumnKind.text:
        return isinstance(value, str)
    # datetime - подкласс date, но отметка времени не календарная дата
    return isinstance(value, date) and not isinstance(value, datetime)


class Table:
    """
    Неизменяемая типизированная таблица.

    Строки хранятся в порядке вставки и отдаются как read-only mapping.
    Отсутствующие во входной строке колонки заполняются ``None``. Индекс по
    ключу строится сразу; строки с NULL в ключе в индекс не попадают.
    """

    def __init__(
        self,
        name: str,
        columns: Mapping[str, ColumnKind],
        rows: Iterable[Mapping[str, Any]] = (),
        key: Optional[str] = None,
    ):
        if key is not None and key not in columns:
            raise UnknownColumn(key, list(columns))
        self.name = name
        self.columns: Dict[str, ColumnKind] = {c: ColumnKind(k) for c, k in columns.items()}
        self.key = key
        self.rows: Tuple[Row, ...] = tuple(self._freeze(r) for r in rows)
        self._index: Dict[Any, Row] = {}
        if key is not None:
            for row in self.rows:
                if row[key] is not None:
                    self._index.setdefault(row[key], row)

    def _freeze(self, row: Mapping[str, Any]) -> Row:
        for column in row:
            if column not in self.columns:
                raise UnknownColumn(column, list(self.columns))
        frozen = {}
        for column, kind in self.columns.items():
            value = row.get(column)
            if value is not None and not _matches(kind, value):
                raise TypeMismatch(
                    f"{self.name}.{column} expects {kind.value}, got {type(value).__name__} {value!r}"
                )
            frozen[column] = value
        return MappingProxyType(frozen)

    @property
    def column_names(self) -> List[str]:
        return list(self.columns)

    def lookup(self, key: Any) -> Optional[Row]:
        if self.key is None:
            raise AnalyticsError(f"Table {self.name!r} has no key column")
        return self._index.get(key)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self):
        return iter(self.rows)

    def __repr__(self) -> str:
        return f"Table(name={self.name!r}, rows={len(self.rows)})"


USERS_COLUMNS = {"user_id": ColumnKind.integer, "name": ColumnKind.text}
RESTAURANTS_COLUMNS = {
    "r_id": ColumnKind.integer,
    "r_name": ColumnKind.text,
    "cuisine": ColumnKind.text,
}
FOOD_COLUMNS = {
    "f_id": ColumnKind.integer,
    "f_name": ColumnKind.text,
    "price": ColumnKind.numeric,
}
ORDERS_COLUMNS = {
    "order_id": ColumnKind.integer,
    "user_id": ColumnKind.integer,
    "r_id": ColumnKind.integer,
    "date": ColumnKind.date,
    "amount": ColumnKind.numeric,
}
ORDER_DETAILS_COLUMNS = {
    "id": ColumnKind.integer,
    "order_id": ColumnKind.integer,
    "f_id": ColumnKind.integer,
}


class TableStore:
    """Снимок именованных таблиц только для чтения; безопасен для параллельных читателей."""

    def __init__(self, tables: Iterable[Table], aliases: Optional[Mapping[str, str]] = None):
        self._tables: Dict[str, Table] = {t.name: t for t in tables}
        self._aliases: Dict[str, str] = dict(aliases or {})
        for alias, target in self._aliases.items():
            if target not in self._tables:
                raise UnknownTable(target, self._tables)

    @classmethod
    def swiggy(
        cls,
        users: Iterable[Mapping[str, Any]] = (),
        restaurants: Iterable[Mapping[str, Any]] = (),
        food: Iterable[Mapping[str, Any]] = (),
        orders: Iterable[Mapping[str, Any]] = (),
        order_details: Iterable[Mapping[str, Any]] = (),
    ) -> "TableStore":
        """Хранилище из пяти таблиц кейса Swiggy; ``menu`` - псевдоним ``food``."""
        store = cls(
            [
                Table("users", USERS_COLUMNS, users, key="user_id"),
                Table("restaurants", RESTAURANTS_COLUMNS, restaurants, key="r_id"),
                Table("food", FOOD_COLUMNS, food, key="f_id"),
                Table("orders", ORDERS_COLUMNS, orders, key="order_id"),
                Table("order_details", ORDER_DETAILS_COLUMNS, order_details, key="id"),
            ],
            aliases={"menu": "food"},
        )
        logger.debug(
            "Snapshot built: %s",
            ", ".join(f"{n}={len(t)}" for n, t in store._tables.items()),
        )
        return store

    @property
    def table_names(self) -> List[str]:
        return list(self._tables)

    def has_table(self, name: str) -> bool:
        return name in self._tables or name in self._aliases

    def table(self, name: str) -> Table:
        resolved = self._aliases.get(name, name)
        try:
            return self._tables[resolved]
        except KeyError:
            raise UnknownTable(name, list(self._tables) + list(self._aliases)) from None

    def scan(self, name: str) -> Tuple[Row, ...]:
        return self.table(name).rows

    def lookup(self, name: str, key: Any) -> Optional[Row]:
        return self.table(name).lookup(key)
