# app/services/cached_dashboard.py
"""
带缓存的 Dashboard 门面：每个操作 = canonical_key → 查缓存 → 未命中则计算 → 写缓存。

计算失败（数据源异常、取消）直接向上抛，不会写入任何缓存条目。
每个请求构造一个实例（数据源绑定请求的 session），缓存本身是进程内共享的。
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, List, Mapping, Optional, TypeVar

from pydantic import BaseModel

from app.core.config import CacheTTLs
from app.domain.ports import DashboardDataSource
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
from app.schemas.supplier_performance import (
    SupplierPerformanceMetrics,
    SupplierRanking,
    SupplierWithPerformance,
)
from app.schemas.warehouse_distribution import (
    StockImbalance,
    WarehouseDistributionResponse,
    WarehouseSummaryStats,
)
from app.services.purchase_order_service import PurchaseOrderService
from app.services.result_cache import ResultCache, canonical_key
from app.services.stock_levels_service import StockLevelsService
from app.services.stock_visualization_service import StockVisualizationService
from app.services.summary_metrics_service import SummaryMetricsService
from app.services.supplier_performance_service import SupplierPerformanceService
from app.services.warehouse_distribution_service import WarehouseDistributionService

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _detached(value: T) -> T:
    if isinstance(value, BaseModel):
        return value.model_copy(deep=True)
    if isinstance(value, list):
        return [_detached(v) for v in value]
    return value


class CachedDashboard:
    def __init__(
        self,
        cache: ResultCache,
        source: DashboardDataSource,
        ttls: Optional[CacheTTLs] = None,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.cache = cache
        self.ttls = ttls or CacheTTLs()
        self.clock = clock
        self.stock = StockLevelsService(source)
        self.summary = SummaryMetricsService(source)
        self.suppliers = SupplierPerformanceService(source)
        self.warehouses = WarehouseDistributionService(source)
        self.visualization = StockVisualizationService(source)
        self.purchases = PurchaseOrderService(source)

    async def _cached(
        self,
        namespace: str,
        fields: Mapping[str, Any],
        ttl: int,
        compute: Callable[[], Awaitable[T]],
    ) -> T:
        key = canonical_key(namespace, fields)
        hit = self.cache.get(key)
        if hit is not None:
            return _detached(hit)
        value = await compute()
        # 缓存里放一份独立副本，调用方改返回值不影响后续读者
        self.cache.set(key, _detached(value), ttl)
        return value

    async def stock_levels(
        self,
        filters: Optional[StockLevelsFilters] = None,
        pagination: Optional[PaginationParams] = None,
    ) -> StockLevelsResponse:
        filters = filters or StockLevelsFilters()
        fields = dict(filters.key_fields())
        if pagination is not None:
            fields.update(pagination.key_fields())
        return await self._cached(
            "stock_levels",
            fields,
            self.ttls.stock_levels,
            lambda: self.stock.get_stock_levels(filters, pagination),
        )

    async def summary_metrics(self, warehouse_id: Optional[int] = None) -> SummaryMetrics:
        return await self._cached(
            "summary_metrics",
            {"warehouse_id": warehouse_id},
            self.ttls.summary_metrics,
            lambda: self.summary.calculate_summary_metrics(warehouse_id),
        )

    async def supplier_performance(self, supplier_id: int) -> SupplierPerformanceMetrics:
        return await self._cached(
            "supplier_performance",
            {"supplier_id": supplier_id},
            self.ttls.supplier_performance,
            lambda: self.suppliers.calculate_supplier_performance(supplier_id, now=self.clock()),
        )

    async def supplier_detail(self, supplier_id: int, recent_limit: int = 10) -> SupplierWithPerformance:
        return await self._cached(
            "supplier_detail",
            {"supplier_id": supplier_id, "recent_limit": recent_limit},
            self.ttls.supplier_detail,
            lambda: self.suppliers.get_supplier_with_performance(
                supplier_id, now=self.clock(), recent_limit=recent_limit
            ),
        )

    async def supplier_rankings(self, limit: int = 10) -> List[SupplierRanking]:
        return await self._cached(
            "supplier_rankings",
            {"limit": limit},
            self.ttls.supplier_rankings,
            lambda: self.suppliers.get_supplier_performance_rankings(limit, now=self.clock()),
        )

    async def warehouse_distribution(
        self, filters: Optional[WarehouseDistributionFilters] = None
    ) -> WarehouseDistributionResponse:
        filters = filters or WarehouseDistributionFilters()
        return await self._cached(
            "warehouse_distribution",
            filters.key_fields(),
            self.ttls.warehouse_distribution,
            lambda: self.warehouses.get_warehouse_distribution(filters),
        )

    async def warehouse_imbalances(
        self, filters: Optional[WarehouseDistributionFilters] = None
    ) -> List[StockImbalance]:
        filters = filters or WarehouseDistributionFilters()
        return await self._cached(
            "warehouse_imbalances",
            {"product_id": filters.product_id, "category": filters.category},
            self.ttls.warehouse_distribution,
            lambda: self.warehouses.identify_stock_imbalances(filters),
        )

    async def warehouse_summary(self, warehouse_id: Optional[int] = None) -> WarehouseSummaryStats:
        return await self._cached(
            "warehouse_summary",
            {"warehouse_id": warehouse_id},
            self.ttls.warehouse_distribution,
            lambda: self.warehouses.get_warehouse_summary_stats(warehouse_id),
        )

    async def stock_visualization(self, warehouse_id: Optional[int] = None) -> StockVisualizationResponse:
        return await self._cached(
            "stock_visualization",
            {"warehouse_id": warehouse_id},
            self.ttls.stock_visualization,
            lambda: self.visualization.get_stock_visualization(warehouse_id, now=self.clock()),
        )

    async def recent_purchases(
        self, filters: Optional[PurchaseOrderFilters] = None, limit: int = 10
    ) -> RecentPurchasesResponse:
        filters = filters or PurchaseOrderFilters()
        fields = dict(filters.key_fields())
        fields["limit"] = limit
        return await self._cached(
            "recent_purchases",
            fields,
            self.ttls.recent_purchases,
            lambda: self.purchases.get_recent_purchases(filters, limit, now=self.clock()),
        )
