# app/api/routers/warehouses.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_dashboard
from app.schemas.filters import WarehouseDistributionFilters
from app.schemas.warehouse_distribution import StockImbalance, WarehouseSummaryStats
from app.services.cached_dashboard import CachedDashboard

router = APIRouter(prefix="/warehouses", tags=["warehouses"])


@router.get("/imbalances", response_model=List[StockImbalance])
async def stock_imbalances(
    product_id: Optional[int] = Query(None, ge=1),
    category: Optional[str] = Query(None, max_length=100),
    dashboard: CachedDashboard = Depends(get_dashboard),
):
    filters = WarehouseDistributionFilters(product_id=product_id, category=category)
    return await dashboard.warehouse_imbalances(filters)


@router.get("/summary-stats", response_model=WarehouseSummaryStats)
async def summary_stats(
    warehouse_id: Optional[int] = Query(None, ge=1),
    dashboard: CachedDashboard = Depends(get_dashboard),
):
    return await dashboard.warehouse_summary(warehouse_id)
