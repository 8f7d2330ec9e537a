# app/services/supplier_performance_service.py
"""
供应商绩效打分。

所有时间窗口（30 / 90 天、逾期判定）都以显式传入的 now 为基准，
打分函数本身是纯函数，只有 Service 方法会访问数据源（每次调用一次）。
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, List, Optional, Sequence

from app.domain.errors import SupplierNotFoundError
from app.domain.ports import DashboardDataSource
from app.domain.rows import PurchaseOrderRow, PurchasingSnapshot, SupplierRow
from app.models.enums import CLOSED_ORDER_STATUSES, PurchaseOrderStatus
from app.schemas.supplier_performance import (
    SupplierContactInfo,
    SupplierPerformanceMetrics,
    SupplierRanking,
    SupplierRecentOrder,
    SupplierWithPerformance,
)

FREQUENCY_WEIGHT = 0.3
DELIVERY_WEIGHT = 0.4
CONSISTENCY_WEIGHT = 0.3


def _as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def delivery_variance_days(order: PurchaseOrderRow) -> Optional[int]:
    """
    到货偏差（整天，向零截断）：completed_at − expected_delivery_date 当天 00:00（UTC）。
    负数=提前，正数=延迟；不满足"已到货且有预计日期"时返回 None。
    """
    if order.status != PurchaseOrderStatus.DELIVERED.value:
        return None
    if order.expected_delivery_date is None or order.completed_at is None:
        return None
    expected = datetime.combine(order.expected_delivery_date, time.min, tzinfo=timezone.utc)
    delta = _as_utc(order.completed_at) - expected
    return int(delta.total_seconds() / 86400)


def reliability_score(
    orders_last_30_days: int, on_time_delivery_rate: float, orders_last_90_days: int
) -> float:
    frequency = min(orders_last_30_days / 5, 1.0)
    delivery = on_time_delivery_rate / 100
    consistency = min(orders_last_90_days / 10, 1.0) if orders_last_90_days > 0 else 0.0
    score = (
        FREQUENCY_WEIGHT * frequency
        + DELIVERY_WEIGHT * delivery
        + CONSISTENCY_WEIGHT * consistency
    )
    # 浮点累加可能略超 1
    return min(score, 1.0)


def build_supplier_performance(
    orders: Sequence[PurchaseOrderRow], *, now: datetime
) -> SupplierPerformanceMetrics:
    """基于供应商全部采购单（任意状态）计算绩效；无订单时返回全 0。"""
    if not orders:
        return SupplierPerformanceMetrics()

    total_orders = len(orders)
    total_value = sum(float(o.total_amount) for o in orders)

    # 窗口按时间点比较：order_date 视为当天 00:00（UTC），与 now − N×24h 比较
    now_utc = _as_utc(now)
    since_30 = now_utc - timedelta(days=30)
    since_90 = now_utc - timedelta(days=90)
    placed = [datetime.combine(o.order_date, time.min, tzinfo=timezone.utc) for o in orders]
    orders_30 = sum(1 for ts in placed if ts >= since_30)
    orders_90 = sum(1 for ts in placed if ts >= since_90)

    variances = [v for v in (delivery_variance_days(o) for o in orders) if v is not None]
    if variances:
        on_time_rate = 100.0 * sum(1 for v in variances if v <= 0) / len(variances)
        avg_days = sum(variances) / len(variances)
    else:
        on_time_rate = 0.0
        avg_days = 0.0

    return SupplierPerformanceMetrics(
        total_orders=total_orders,
        total_value=round(total_value, 2),
        average_order_value=round(total_value / total_orders, 2),
        on_time_delivery_rate=round(on_time_rate, 2),
        average_delivery_days=round(avg_days, 2),
        last_order_date=max(o.order_date for o in orders),
        orders_last_30_days=orders_30,
        orders_last_90_days=orders_90,
        reliability_score=round(reliability_score(orders_30, on_time_rate, orders_90), 2),
    )


def contact_info(supplier: SupplierRow) -> SupplierContactInfo:
    return SupplierContactInfo(
        id=supplier.id,
        name=supplier.name,
        contact_name=supplier.contact_name,
        email=supplier.email,
        phone=supplier.phone,
        address=supplier.address,
        city=supplier.city,
        state=supplier.state,
        zip_code=supplier.zip_code,
        supplier_type=supplier.supplier_type,
        active=supplier.active,
    )


def is_overdue(order: PurchaseOrderRow, today: date) -> bool:
    if order.expected_delivery_date is None:
        return False
    if order.status in {s.value for s in CLOSED_ORDER_STATUSES}:
        return False
    return order.expected_delivery_date < today


def latest_first(orders: Iterable[PurchaseOrderRow]) -> List[PurchaseOrderRow]:
    return sorted(orders, key=lambda o: (o.order_date, o.id), reverse=True)


def build_supplier_rankings(
    snapshot: PurchasingSnapshot, limit: int, *, now: datetime
) -> List[SupplierRanking]:
    """
    排名：
      - 只看启用供应商
      - 剔除 total_orders == 0
      - reliability_score 降序，同分按名称、id
      - 先截断到 limit，再按顺序赋 rank（从 1 开始）
    """
    scored = []
    for s in snapshot.suppliers:
        if not s.active:
            continue
        perf = build_supplier_performance(snapshot.orders_of(s.id), now=now)
        if perf.total_orders == 0:
            continue
        scored.append((s, perf))

    scored.sort(key=lambda sp: (-sp[1].reliability_score, sp[0].name, sp[0].id))

    return [
        SupplierRanking(supplier=contact_info(s), performance=perf, rank=idx)
        for idx, (s, perf) in enumerate(scored[: max(limit, 0)], start=1)
    ]


def build_supplier_with_performance(
    snapshot: PurchasingSnapshot,
    supplier_id: int,
    *,
    now: datetime,
    recent_limit: int = 10,
) -> SupplierWithPerformance:
    supplier = snapshot.supplier(supplier_id)
    if supplier is None:
        raise SupplierNotFoundError(supplier_id)

    orders = snapshot.orders_of(supplier_id)
    today = now.date()
    recent = [
        SupplierRecentOrder(
            id=o.id,
            po_number=o.po_number,
            order_date=o.order_date,
            expected_delivery_date=o.expected_delivery_date,
            status=o.status,
            total_amount=float(o.total_amount),
            product_count=o.line_count,
            is_overdue=is_overdue(o, today),
        )
        for o in latest_first(orders)[:recent_limit]
    ]

    return SupplierWithPerformance(
        supplier=contact_info(supplier),
        performance=build_supplier_performance(orders, now=now),
        recent_orders=recent,
    )


class SupplierPerformanceService:
    def __init__(self, source: DashboardDataSource):
        self.source = source

    async def calculate_supplier_performance(
        self, supplier_id: int, *, now: datetime
    ) -> SupplierPerformanceMetrics:
        snapshot = await self.source.load_purchasing(supplier_id=supplier_id)
        return build_supplier_performance(snapshot.orders_of(supplier_id), now=now)

    async def get_supplier_performance_rankings(
        self, limit: int = 10, *, now: datetime
    ) -> List[SupplierRanking]:
        snapshot = await self.source.load_purchasing(active_only=True)
        return build_supplier_rankings(snapshot, limit, now=now)

    async def get_supplier_with_performance(
        self, supplier_id: int, *, now: datetime, recent_limit: int = 10
    ) -> SupplierWithPerformance:
        snapshot = await self.source.load_purchasing(supplier_id=supplier_id)
        return build_supplier_with_performance(
            snapshot, supplier_id, now=now, recent_limit=recent_limit
        )
