# app/services/purchase_order_service.py
from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from app.domain.ports import DashboardDataSource
from app.domain.rows import PurchaseOrderRow, PurchasingSnapshot, SupplierRow
from app.schemas.filters import PurchaseOrderFilters
from app.schemas.purchase_orders import (
    PurchaseSupplierRef,
    RecentPurchaseOrder,
    RecentPurchasesResponse,
)
from app.services.supplier_performance_service import is_overdue, latest_first


def matches_filters(order: PurchaseOrderRow, filters: PurchaseOrderFilters) -> bool:
    if filters.supplier_id is not None and order.supplier_id != filters.supplier_id:
        return False
    if filters.status is not None and order.status != filters.status.value:
        return False
    if filters.date_from is not None and order.order_date < filters.date_from:
        return False
    if filters.date_to is not None and order.order_date > filters.date_to:
        return False
    return True


def _to_item(order: PurchaseOrderRow, supplier: SupplierRow, *, now: datetime) -> RecentPurchaseOrder:
    return RecentPurchaseOrder(
        id=order.id,
        po_number=order.po_number,
        supplier=PurchaseSupplierRef(
            id=supplier.id, name=supplier.name, contact_name=supplier.contact_name
        ),
        order_date=order.order_date,
        expected_delivery_date=order.expected_delivery_date,
        status=order.status,
        product_count=order.line_count,
        total_amount=float(order.total_amount),
        is_overdue=is_overdue(order, now.date()),
    )


def _with_suppliers(
    snapshot: PurchasingSnapshot, orders: Iterable[PurchaseOrderRow], *, now: datetime
) -> List[RecentPurchaseOrder]:
    # 供应商主档缺失的采购单不展示
    suppliers: Dict[int, SupplierRow] = {s.id: s for s in snapshot.suppliers}
    return [
        _to_item(o, suppliers[o.supplier_id], now=now)
        for o in orders
        if o.supplier_id in suppliers
    ]


def build_recent_purchases(
    snapshot: PurchasingSnapshot,
    filters: PurchaseOrderFilters,
    limit: int = 10,
    *,
    now: datetime,
) -> RecentPurchasesResponse:
    """order_date 倒序（同日按 id 倒序）；先过滤再截断到 limit。"""
    orders = latest_first(o for o in snapshot.orders if matches_filters(o, filters))
    items = _with_suppliers(snapshot, orders, now=now)
    return RecentPurchasesResponse(recent_orders=items[: max(limit, 0)])


def build_overdue_purchase_orders(
    snapshot: PurchasingSnapshot, *, now: datetime
) -> List[RecentPurchaseOrder]:
    today = now.date()
    overdue = [o for o in snapshot.orders if is_overdue(o, today)]
    overdue.sort(key=lambda o: (o.expected_delivery_date, o.id))
    return _with_suppliers(snapshot, overdue, now=now)


class PurchaseOrderService:
    """采购单只读视图：最近采购 / 逾期采购。"""

    def __init__(self, source: DashboardDataSource):
        self.source = source

    async def get_recent_purchases(
        self,
        filters: Optional[PurchaseOrderFilters] = None,
        limit: int = 10,
        *,
        now: datetime,
    ) -> RecentPurchasesResponse:
        filters = filters or PurchaseOrderFilters()
        snapshot = await self.source.load_purchasing(supplier_id=filters.supplier_id)
        return build_recent_purchases(snapshot, filters, limit, now=now)

    async def get_overdue_purchase_orders(self, *, now: datetime) -> List[RecentPurchaseOrder]:
        snapshot = await self.source.load_purchasing()
        return build_overdue_purchase_orders(snapshot, now=now)
