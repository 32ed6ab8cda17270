from datetime import datetime

from fastapi import APIRouter

from swiggy_analytics.reports import REPORTS

router = APIRouter()


@router.get("/health", summary="Health check")
async def health_check():
    """
    Health-check без обращения к БД: сервис поднят, каталог отчётов загружен.
    """
    return {
        "status": "ok",
        "service": "swiggy-analytics",
        "reports_available": len(REPORTS),
        "timestamp": datetime.now(),
    }
