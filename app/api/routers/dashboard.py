# app/api/routers/dashboard.py
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_dashboard
from app.models.enums import PurchaseOrderStatus, StockFilter
from app.schemas.filters import (
    PaginationParams,
    PurchaseOrderFilters,
    StockLevelsFilters,
    WarehouseDistributionFilters,
)
from app.schemas.purchase_orders import RecentPurchasesResponse
from app.schemas.stock_levels import StockLevelsResponse
from app.schemas.stock_visualization import StockVisualizationResponse
from app.schemas.summary_metrics import SummaryMetrics
from app.schemas.warehouse_distribution import WarehouseDistributionResponse
from app.services.cached_dashboard import CachedDashboard

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/summary-metrics", response_model=SummaryMetrics)
async def summary_metrics(
    warehouse_id: Optional[int] = Query(None, ge=1),
    dashboard: CachedDashboard = Depends(get_dashboard),
):
    return await dashboard.summary_metrics(warehouse_id)


@router.get("/stock-levels", response_model=StockLevelsResponse)
async def stock_levels(
    warehouse_id: Optional[int] = Query(None, ge=1),
    stock_filter: StockFilter = Query(StockFilter.ALL),
    search: Optional[str] = Query(None, min_length=1, max_length=100),
    category: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    dashboard: CachedDashboard = Depends(get_dashboard),
):
    filters = StockLevelsFilters(
        warehouse_id=warehouse_id,
        stock_filter=stock_filter,
        search=search.strip() if search else None,
        category=category,
    )
    return await dashboard.stock_levels(filters, PaginationParams(page=page, limit=limit))


@router.get("/recent-purchases", response_model=RecentPurchasesResponse)
async def recent_purchases(
    supplier_id: Optional[int] = Query(None, ge=1),
    status: Optional[PurchaseOrderStatus] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    limit: int = Query(10, ge=1, le=50),
    dashboard: CachedDashboard = Depends(get_dashboard),
):
    filters = PurchaseOrderFilters(
        supplier_id=supplier_id, status=status, date_from=date_from, date_to=date_to
    )
    return await dashboard.recent_purchases(filters, limit)


@router.get("/warehouse-distribution", response_model=WarehouseDistributionResponse)
async def warehouse_distribution(
    warehouse_id: Optional[int] = Query(None, ge=1),
    product_id: Optional[int] = Query(None, ge=1),
    category: Optional[str] = Query(None, max_length=100),
    min_value: Optional[float] = Query(None, ge=0),
    dashboard: CachedDashboard = Depends(get_dashboard),
):
    filters = WarehouseDistributionFilters(
        warehouse_id=warehouse_id,
        product_id=product_id,
        category=category,
        min_value=min_value,
    )
    return await dashboard.warehouse_distribution(filters)


@router.get("/stock-visualization", response_model=StockVisualizationResponse)
async def stock_visualization(
    warehouse_id: Optional[int] = Query(None, ge=1),
    dashboard: CachedDashboard = Depends(get_dashboard),
):
    return await dashboard.stock_visualization(warehouse_id)
