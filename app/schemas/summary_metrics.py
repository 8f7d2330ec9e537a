# app/schemas/summary_metrics.py
from __future__ import annotations

from pydantic import BaseModel

from app.models.enums import MetricStatus

# low_stock 指标上展示用的固定阈值（与 critical 分界值相同，保持原样）
LOW_STOCK_DISPLAY_THRESHOLD = 50


class CountMetric(BaseModel):
    value: int = 0
    status: MetricStatus


class LowStockMetric(CountMetric):
    threshold: int = LOW_STOCK_DISPLAY_THRESHOLD


class StockValueMetric(BaseModel):
    value: float = 0.0
    currency: str = "USD"
    status: MetricStatus
    excluded_products: int = 0


class SummaryMetrics(BaseModel):
    """
    Dashboard 顶部五个指标：
    - total_products     启用商品数
    - low_stock          低库存商品数（带展示阈值 threshold）
    - out_of_stock       缺货商品数
    - suppliers          启用供应商数（不受仓库过滤影响）
    - total_stock_value  Σ(qty × unit_cost)，及未计价商品数 excluded_products
    """

    total_products: CountMetric
    low_stock: LowStockMetric
    out_of_stock: CountMetric
    suppliers: CountMetric
    total_stock_value: StockValueMetric
