from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from swiggy_analytics.analytics import TableStore
from swiggy_analytics.crud.snapshot import load_snapshot
from swiggy_analytics.db.session import get_async_session


async def get_snapshot(db: AsyncSession = Depends(get_async_session)) -> TableStore:
    """
    Снимок таблиц для одного запроса. Подменяется в тестах через dependency_overrides.
    """
    return await load_snapshot(db)
