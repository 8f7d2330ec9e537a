# app/schemas/supplier_performance.py
from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel


class SupplierPerformanceMetrics(BaseModel):
    """
    供应商绩效（全部数值字段缺省为 0，零订单供应商也返回完整对象）：

    - on_time_delivery_rate   准时到货率（%）
    - average_delivery_days   平均到货偏差天数（负=提前，正=延迟）
    - reliability_score       0.3·频次 + 0.4·准时 + 0.3·持续性，∈ [0, 1]
    """

    total_orders: int = 0
    total_value: float = 0.0
    average_order_value: float = 0.0
    on_time_delivery_rate: float = 0.0
    average_delivery_days: float = 0.0
    last_order_date: Optional[date] = None
    orders_last_30_days: int = 0
    orders_last_90_days: int = 0
    reliability_score: float = 0.0


class SupplierContactInfo(BaseModel):
    id: int
    name: str
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    supplier_type: str = "supplier"
    active: bool = True


class SupplierRecentOrder(BaseModel):
    id: int
    po_number: str
    order_date: date
    expected_delivery_date: Optional[date] = None
    status: str
    total_amount: float
    product_count: int
    is_overdue: bool


class SupplierWithPerformance(BaseModel):
    supplier: SupplierContactInfo
    performance: SupplierPerformanceMetrics
    recent_orders: List[SupplierRecentOrder] = []


class SupplierRanking(BaseModel):
    supplier: SupplierContactInfo
    performance: SupplierPerformanceMetrics
    rank: int
