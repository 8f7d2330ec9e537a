# app/services/warehouse_distribution_service.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from app.domain.ports import DashboardDataSource
from app.domain.rows import InventorySnapshot, LocationRow, ProductRow, StockRecordRow
from app.schemas.filters import WarehouseDistributionFilters
from app.schemas.warehouse_distribution import (
    ImbalanceLocation,
    StockImbalance,
    TransferSuggestion,
    WarehouseDistributionItem,
    WarehouseDistributionResponse,
    WarehouseProductEntry,
    WarehouseSummaryStats,
)

IMBALANCE_THRESHOLD = 0.3


@dataclass(frozen=True)
class _Line:
    location: LocationRow
    product: ProductRow
    record: StockRecordRow


def _lines(
    snapshot: InventorySnapshot,
    filters: WarehouseDistributionFilters,
    *,
    in_stock_only: bool = True,
) -> List[_Line]:
    """
    启用库位 × 启用商品 × 库存行；按 warehouse / product / category 过滤。
    顺序：库位名 → 商品名。
    """
    products: Dict[int, ProductRow] = {p.id: p for p in snapshot.products if p.active}
    out: List[_Line] = []
    for r in snapshot.records:
        if in_stock_only and r.quantity_on_hand <= 0:
            continue
        if filters.warehouse_id is not None and r.location_id != filters.warehouse_id:
            continue
        if filters.product_id is not None and r.product_id != filters.product_id:
            continue
        loc = snapshot.locations.get(r.location_id)
        prod = products.get(r.product_id)
        if loc is None or not loc.active or prod is None:
            continue
        if filters.category and prod.category != filters.category:
            continue
        out.append(_Line(location=loc, product=prod, record=r))
    out.sort(key=lambda ln: (ln.location.name, ln.location.id, ln.product.name, ln.product.id))
    return out


def build_warehouse_distribution(
    snapshot: InventorySnapshot, filters: WarehouseDistributionFilters
) -> WarehouseDistributionResponse:
    """
    按库位分组：total_products / total_quantity / total_value + 商品明细。

    min_value 作用在单个商品行上；行全部被过滤掉的库位仍然出现（汇总为 0）。
    """
    items: Dict[int, WarehouseDistributionItem] = {}

    for ln in _lines(snapshot, filters):
        loc = ln.location
        item = items.get(loc.id)
        if item is None:
            item = WarehouseDistributionItem(
                warehouse_id=loc.id,
                warehouse_name=loc.name,
                warehouse_address=loc.address,
            )
            items[loc.id] = item

        rec = ln.record
        value = rec.value
        if filters.min_value is not None and value < filters.min_value:
            continue

        item.products.append(
            WarehouseProductEntry(
                product_id=ln.product.id,
                sku=ln.product.sku,
                name=ln.product.name,
                quantity=int(rec.quantity_on_hand),
                unit_cost=float(rec.unit_cost) if rec.unit_cost is not None else None,
                total_value=round(value, 2),
            )
        )
        item.total_quantity += int(rec.quantity_on_hand)
        item.total_value += value
        if not rec.has_cost:
            item.excluded_records += 1

    for item in items.values():
        item.total_products = len({p.product_id for p in item.products})
        item.total_value = round(item.total_value, 2)

    return WarehouseDistributionResponse(warehouses=list(items.values()))


# ---------------------------------------------------------------------------
# 不均衡识别
# ---------------------------------------------------------------------------


def imbalance_score(percentages: List[float]) -> float:
    """变异系数（总体标准差 / 均值）归一到 [0, 1]：min(cv / 2, 1)。"""
    if not percentages:
        return 0.0
    mean = sum(percentages) / len(percentages)
    if mean <= 0:
        return 0.0
    variance = sum((p - mean) ** 2 for p in percentages) / len(percentages)
    return min(math.sqrt(variance) / mean / 2, 1.0)


def suggest_transfers(
    locations: List[ImbalanceLocation], total_stock: int
) -> List[TransferSuggestion]:
    """
    贪心：以 floor(total / n) 为目标，库存多的库位依次向每个不足库位调拨 min(多出, 缺口)。
    多出 / 缺口按初始数量计算，不在循环中扣减。
    """
    ideal = total_stock // len(locations)
    ordered = sorted(locations, key=lambda x: -x.quantity)
    excess = [x for x in ordered if x.quantity > ideal]
    deficit = [x for x in ordered if x.quantity < ideal]

    out: List[TransferSuggestion] = []
    for src in excess:
        surplus = src.quantity - ideal
        for dst in deficit:
            qty = min(surplus, ideal - dst.quantity)
            if qty > 0:
                out.append(
                    TransferSuggestion(
                        from_warehouse_id=src.warehouse_id,
                        to_warehouse_id=dst.warehouse_id,
                        suggested_quantity=qty,
                    )
                )
    return out


def build_stock_imbalances(
    snapshot: InventorySnapshot, filters: WarehouseDistributionFilters
) -> List[StockImbalance]:
    # 不均衡看全部库位，忽略 warehouse_id / min_value
    scoped = WarehouseDistributionFilters(product_id=filters.product_id, category=filters.category)

    grouped: Dict[int, Tuple[ProductRow, List[_Line]]] = {}
    for ln in _lines(snapshot, scoped):
        grouped.setdefault(ln.product.id, (ln.product, []))[1].append(ln)

    out: List[StockImbalance] = []
    for product, lines in grouped.values():
        if len(lines) < 2:
            continue
        total = sum(int(ln.record.quantity_on_hand) for ln in lines)
        locs = [
            ImbalanceLocation(
                warehouse_id=ln.location.id,
                warehouse_name=ln.location.name,
                quantity=int(ln.record.quantity_on_hand),
                percentage=(ln.record.quantity_on_hand / total * 100) if total > 0 else 0.0,
            )
            for ln in lines
        ]
        score = imbalance_score([x.percentage for x in locs])
        if score <= IMBALANCE_THRESHOLD:
            continue
        out.append(
            StockImbalance(
                product_id=product.id,
                sku=product.sku,
                name=product.name,
                total_stock=total,
                locations=locs,
                imbalance_score=round(score, 4),
                suggested_transfers=suggest_transfers(locs, total),
            )
        )

    out.sort(key=lambda x: (-x.imbalance_score, x.name, x.product_id))
    return out


def build_warehouse_summary_stats(
    snapshot: InventorySnapshot, warehouse_id: Optional[int] = None
) -> WarehouseSummaryStats:
    """
    只统计"启用库位 × 启用商品"的库存行（含 0 数量行）：
      - total_warehouses           有这类库存行的库位数
      - warehouses_with_inventory  其中有 qty > 0 行的库位数
    """
    lines = _lines(
        snapshot, WarehouseDistributionFilters(warehouse_id=warehouse_id), in_stock_only=False
    )
    warehouses = {ln.location.id for ln in lines}
    stocked = {ln.location.id for ln in lines if ln.record.quantity_on_hand > 0}
    products = {ln.product.id for ln in lines}
    total_value = sum(ln.record.value for ln in lines)

    n = len(warehouses)
    return WarehouseSummaryStats(
        total_warehouses=n,
        total_products=len(products),
        total_value=round(total_value, 2),
        average_value_per_warehouse=round(total_value / n, 2) if n else 0.0,
        warehouses_with_inventory=len(stocked),
    )


class WarehouseDistributionService:
    def __init__(self, source: DashboardDataSource):
        self.source = source

    async def get_warehouse_distribution(
        self, filters: Optional[WarehouseDistributionFilters] = None
    ) -> WarehouseDistributionResponse:
        filters = filters or WarehouseDistributionFilters()
        snapshot = await self.source.load_inventory(warehouse_id=filters.warehouse_id)
        return build_warehouse_distribution(snapshot, filters)

    async def identify_stock_imbalances(
        self, filters: Optional[WarehouseDistributionFilters] = None
    ) -> List[StockImbalance]:
        snapshot = await self.source.load_inventory()
        return build_stock_imbalances(snapshot, filters or WarehouseDistributionFilters())

    async def get_warehouse_summary_stats(
        self, warehouse_id: Optional[int] = None
    ) -> WarehouseSummaryStats:
        snapshot = await self.source.load_inventory(warehouse_id=warehouse_id)
        return build_warehouse_summary_stats(snapshot, warehouse_id)
