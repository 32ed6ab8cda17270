import logging

from fastapi import FastAPI
from .api import health
from swiggy_analytics.api.routes.reports import router as reports_router
from swiggy_analytics.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Swiggy Analytics")

# Подключаем роуты
app.include_router(health.router)
app.include_router(reports_router)

@app.on_event("startup")
async def on_startup():
    logger.info("Application started")

@app.on_event("shutdown")
async def on_shutdown():
    logger.info("Application stopped")
