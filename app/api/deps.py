# app/api/deps.py
from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.session import get_session
from app.domain.ports import DashboardDataSource
from app.services.cached_dashboard import CachedDashboard
from app.services.dashboard_data_source import SqlDashboardDataSource
from app.services.result_cache import ResultCache


def get_result_cache(request: Request) -> ResultCache:
    """进程内共享的结果缓存，由 lifespan 创建并挂在 app.state 上。"""
    return request.app.state.result_cache


def get_data_source(session: AsyncSession = Depends(get_session)) -> DashboardDataSource:
    return SqlDashboardDataSource(session)


def get_dashboard(
    source: DashboardDataSource = Depends(get_data_source),
    cache: ResultCache = Depends(get_result_cache),
) -> CachedDashboard:
    return CachedDashboard(cache, source, get_settings().cache_ttls())
