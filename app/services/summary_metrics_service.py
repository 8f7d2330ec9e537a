# app/services/summary_metrics_service.py
from __future__ import annotations

from typing import Optional, Set

from app.domain.ports import DashboardDataSource
from app.domain.rows import InventorySnapshot
from app.models.enums import MetricStatus
from app.schemas.summary_metrics import (
    CountMetric,
    LowStockMetric,
    StockValueMetric,
    SummaryMetrics,
)
from app.services import stock_aggregation as agg

# ---------------------------------------------------------------------------
# 阈值判定
# ---------------------------------------------------------------------------


def product_count_status(count: int) -> MetricStatus:
    if count == 0:
        return MetricStatus.CRITICAL
    if count < 10:
        return MetricStatus.WARNING
    return MetricStatus.NORMAL


def low_stock_status(count: int) -> MetricStatus:
    if count == 0:
        return MetricStatus.NORMAL
    if count >= 50:
        return MetricStatus.CRITICAL
    if count >= 20:
        return MetricStatus.WARNING
    return MetricStatus.NORMAL


def out_of_stock_status(count: int) -> MetricStatus:
    if count == 0:
        return MetricStatus.NORMAL
    if count >= 10:
        return MetricStatus.CRITICAL
    if count >= 5:
        return MetricStatus.WARNING
    return MetricStatus.NORMAL


def suppliers_status(count: int) -> MetricStatus:
    if count == 0:
        return MetricStatus.CRITICAL
    if count < 5:
        return MetricStatus.WARNING
    return MetricStatus.NORMAL


def stock_value_status(value: float) -> MetricStatus:
    if value == 0:
        return MetricStatus.CRITICAL
    if value < 10000:
        return MetricStatus.WARNING
    return MetricStatus.NORMAL


# ---------------------------------------------------------------------------
# 计算
# ---------------------------------------------------------------------------


def build_summary_metrics(
    snapshot: InventorySnapshot, warehouse_id: Optional[int] = None
) -> SummaryMetrics:
    active_products = [p for p in snapshot.products if p.active]
    active_ids: Set[int] = {p.id for p in active_products}
    records = agg.restrict_records(snapshot.records, warehouse_id)
    groups = agg.group_by_product(records)

    # total_products：指定仓库时只算在该仓有库存行的商品
    if warehouse_id is None:
        total_products = len(active_products)
    else:
        total_products = sum(1 for pid in groups if pid in active_ids)

    low_stock = 0
    out_of_stock = 0
    for p in active_products:
        # 指定仓库时，没有该仓库存行的商品不参与状态统计
        if warehouse_id is not None and p.id not in groups:
            continue
        qty = sum(int(r.quantity_on_hand) for r in groups.get(p.id, ()))
        if qty == 0:
            out_of_stock += 1
        elif p.reorder_point > 0 and qty < p.reorder_point:
            low_stock += 1

    suppliers = sum(1 for s in snapshot.suppliers if s.active)

    # 库存价值：只算 unit_cost > 0 的行（按库存行汇总，不区分商品启用状态）
    total_value = sum(r.value for r in records if r.has_cost)
    # 未计价商品：启用商品中，所有相关库存行都没有有效单价
    excluded_products = sum(
        1
        for pid, rows in groups.items()
        if pid in active_ids and rows and not any(r.has_cost for r in rows)
    )

    return SummaryMetrics(
        total_products=CountMetric(value=total_products, status=product_count_status(total_products)),
        low_stock=LowStockMetric(value=low_stock, status=low_stock_status(low_stock)),
        out_of_stock=CountMetric(value=out_of_stock, status=out_of_stock_status(out_of_stock)),
        suppliers=CountMetric(value=suppliers, status=suppliers_status(suppliers)),
        total_stock_value=StockValueMetric(
            value=round(float(total_value), 2),
            status=stock_value_status(total_value),
            excluded_products=excluded_products,
        ),
    )


class SummaryMetricsService:
    """Dashboard 顶部指标（五项）。空数据返回全 0，不抛错。"""

    def __init__(self, source: DashboardDataSource):
        self.source = source

    async def calculate_summary_metrics(self, warehouse_id: Optional[int] = None) -> SummaryMetrics:
        snapshot = await self.source.load_inventory(warehouse_id=warehouse_id, with_suppliers=True)
        return build_summary_metrics(snapshot, warehouse_id)
