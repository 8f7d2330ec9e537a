# app/api/routers/suppliers.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Path, Query

from app.api.deps import get_dashboard
from app.schemas.supplier_performance import (
    SupplierPerformanceMetrics,
    SupplierRanking,
    SupplierWithPerformance,
)
from app.services.cached_dashboard import CachedDashboard

router = APIRouter(prefix="/suppliers", tags=["suppliers"])


# 注意：/rankings 必须注册在 /{supplier_id} 之前
@router.get("/rankings", response_model=List[SupplierRanking])
async def supplier_rankings(
    limit: int = Query(10, ge=1, le=50),
    dashboard: CachedDashboard = Depends(get_dashboard),
):
    return await dashboard.supplier_rankings(limit)


@router.get("/{supplier_id}/performance", response_model=SupplierPerformanceMetrics)
async def supplier_performance(
    supplier_id: int = Path(..., ge=1),
    dashboard: CachedDashboard = Depends(get_dashboard),
):
    return await dashboard.supplier_performance(supplier_id)


@router.get("/{supplier_id}", response_model=SupplierWithPerformance)
async def supplier_detail(
    supplier_id: int = Path(..., ge=1),
    recent_limit: int = Query(10, ge=1, le=50),
    dashboard: CachedDashboard = Depends(get_dashboard),
):
    # 不存在时 SupplierNotFoundError → 404（全局异常处理）
    return await dashboard.supplier_detail(supplier_id, recent_limit)
