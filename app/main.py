# app/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.problem import problem_response
from app.api.routers.dashboard import router as dashboard_router
from app.api.routers.health import router as health_router
from app.api.routers.suppliers import router as suppliers_router
from app.api.routers.warehouses import router as warehouses_router
from app.core.config import get_settings
from app.core.logging import setup_logging
from app.core.scheduler import CacheSweeper
from app.db.session import close_engines
from app.domain.errors import DashboardError, DataSourceError
from app.metrics import router as metrics_router
from app.obs.metrics import PrometheusMiddleware, dashboard_datasource_errors_total
from app.services.result_cache import ResultCache

logger = logging.getLogger("dashboard")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    生命周期：
      - 启动：日志 → 结果缓存（挂到 app.state）→ 后台过期清理
      - 关闭：停清理任务 → 清空缓存 → 释放数据库引擎
    """
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, json=settings.JSON_LOG)

    cache = ResultCache(default_ttl=settings.CACHE_DEFAULT_TTL)
    app.state.result_cache = cache

    sweeper = None
    if settings.CACHE_SWEEP_ENABLED:
        sweeper = CacheSweeper(cache, settings.CACHE_SWEEP_INTERVAL_SECONDS)
        sweeper.start()

    logger.info("dashboard started: env=%s", settings.ENV)
    try:
        yield
    finally:
        if sweeper is not None:
            sweeper.shutdown()
        cache.clear()
        await close_engines()
        logger.info("dashboard stopped")


app = FastAPI(
    title="Inventory Dashboard",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://127.0.0.1:5173",
        "http://localhost:5173",
        "http://127.0.0.1:8000",
        "http://localhost:8000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(PrometheusMiddleware)


@app.exception_handler(DashboardError)
async def _dashboard_exc(_req: Request, exc: DashboardError):
    if isinstance(exc, DataSourceError):
        dashboard_datasource_errors_total.labels(exc.op).inc()
        logger.error("DATA_SOURCE_ERROR: %s", exc.message)
    return problem_response(exc)


@app.exception_handler(Exception)
async def _unhandled_exc(_req: Request, exc: Exception):
    logger.exception("UNHANDLED_EXC: %s", exc)
    return JSONResponse(status_code=500, content={"detail": "INTERNAL_ERROR"})


@app.exception_handler(RequestValidationError)
async def _validation_exc(_req: Request, exc: RequestValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.errors()})


@app.exception_handler(HTTPException)
async def _http_exc(_req: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


app.include_router(dashboard_router)
app.include_router(suppliers_router)
app.include_router(warehouses_router)
app.include_router(health_router)
app.include_router(metrics_router)


@app.get("/")
async def root():
    return {"name": "Inventory Dashboard", "version": "1.0.0"}
