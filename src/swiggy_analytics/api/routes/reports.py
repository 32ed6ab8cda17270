import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from swiggy_analytics import reports
from swiggy_analytics.analytics import AnalyticsError, Result, TableStore
from swiggy_analytics.config import settings
from swiggy_analytics.db.deps import get_snapshot
from swiggy_analytics.schemas.report import ReportInfo, ReportResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


def _run(name: str, title: str, fn, *args) -> ReportResult:
    try:
        result: Result = fn(*args)
    except (AnalyticsError, ValueError) as e:
        logger.warning("Report %s failed: %s", name, e)
        raise HTTPException(status_code=400, detail=str(e))
    return ReportResult.from_result(name, title, result)


@router.get("/", response_model=List[ReportInfo])
async def list_reports():
    """
    Каталог отчётов без параметров.
    """
    return [ReportInfo(slug=slug, title=r.title) for slug, r in reports.REPORTS.items()]


@router.get("/top-restaurants-in-month", response_model=ReportResult)
async def top_restaurants_in_month_endpoint(
    year: int = Query(..., description="Год"),
    month: int = Query(..., ge=1, le=12, description="Номер месяца (1-12)"),
    top: int = Query(1, ge=1, description="Сколько мест рейтинга вернуть"),
    store: TableStore = Depends(get_snapshot),
):
    """
    Лидеры по количеству заказов в конкретном месяце (с учётом равенства).
    """
    return _run(
        "top-restaurants-in-month",
        f"Top restaurants in {year}-{month:02d}",
        reports.top_restaurants_in_month,
        store, year, month, top,
    )


@router.get("/monthly-sales-above", response_model=ReportResult)
async def monthly_sales_above_endpoint(
    threshold: Optional[int] = Query(None, description="Порог выручки за месяц"),
    store: TableStore = Depends(get_snapshot),
):
    """
    Рестораны с выручкой за месяц выше порога (по умолчанию из настроек).
    """
    if threshold is None:
        threshold = settings.MONTHLY_SALES_THRESHOLD
    return _run(
        "monthly-sales-above",
        f"Restaurants with monthly sales above {threshold}",
        reports.restaurants_with_monthly_sales_above,
        store, threshold,
    )


@router.get("/customer-orders", response_model=ReportResult)
async def customer_orders_endpoint(
    user_id: int = Query(..., description="ID клиента"),
    date_from: date = Query(..., description="Начальная дата (YYYY-MM-DD)"),
    date_to: date = Query(..., description="Конечная дата (YYYY-MM-DD)"),
    store: TableStore = Depends(get_snapshot),
):
    """
    Заказы клиента с позициями за период.
    """
    if date_from > date_to:
        raise HTTPException(status_code=400, detail="date_from must not be after date_to")
    return _run(
        "customer-orders",
        f"Orders of customer {user_id}",
        reports.customer_orders_in_range,
        store, user_id, date_from, date_to,
    )


@router.get("/legacy-top-restaurants-by-month", response_model=ReportResult)
async def legacy_top_restaurants_endpoint(
    n: Optional[int] = Query(None, ge=1, description="LIMIT исходного запроса"),
    store: TableStore = Depends(get_snapshot),
):
    """
    Исходный запрос с глобальным LIMIT (не по месяцам). Только для сверки.
    """
    if n is None:
        n = settings.LEGACY_TOP_N
    report = reports.REPORTS["legacy-top-restaurants-by-month"]
    return _run("legacy-top-restaurants-by-month", report.title, report.run, store, n)


@router.get("/{slug}", response_model=ReportResult)
async def get_report(
    slug: str = Path(..., description="Идентификатор отчёта"),
    store: TableStore = Depends(get_snapshot),
):
    """
    Выполняет отчёт из каталога по его идентификатору.
    """
    report = reports.REPORTS.get(slug)
    if not report:
        raise HTTPException(status_code=404, detail="Report not found")
    return _run(slug, report.title, report.run, store)
