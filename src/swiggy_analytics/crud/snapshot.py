import logging
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from swiggy_analytics.analytics import TableStore
from swiggy_analytics.models import Food, Order, OrderDetail, Restaurant, User

logger = logging.getLogger(__name__)


def _to_row(obj, model) -> Dict[str, Any]:
    return {column.name: getattr(obj, column.key) for column in model.__table__.columns}


async def _load_rows(db: AsyncSession, model) -> List[Dict[str, Any]]:
    """
    Читает всю таблицу модели, сортировка по первичному ключу.
    """
    primary_key = list(model.__table__.primary_key.columns)
    stmt = select(model).order_by(*primary_key)
    result = await db.execute(stmt)
    rows = [_to_row(obj, model) for obj in result.scalars().all()]
    logger.info("Loaded %d rows from %s", len(rows), model.__tablename__)
    return rows


async def load_snapshot(db: AsyncSession) -> TableStore:
    """
    Загружает снимок всех пяти таблиц в TableStore.
    Дальнейшие отчёты считаются по снимку, без обращений к БД.
    """
    return TableStore.swiggy(
        users=await _load_rows(db, User),
        restaurants=await _load_rows(db, Restaurant),
        food=await _load_rows(db, Food),
        orders=await _load_rows(db, Order),
        order_details=await _load_rows(db, OrderDetail),
    )
