# app/services/stock_visualization_service.py
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from app.domain.ports import DashboardDataSource
from app.domain.rows import InventorySnapshot, LocationRow, ProductRow
from app.schemas.stock_visualization import (
    ChartConfig,
    StockVisualizationProduct,
    StockVisualizationResponse,
    WarehouseFilterEcho,
    WarehouseStockPoint,
)

COLOR_PALETTE: Tuple[str, ...] = (
    "#3B82F6",
    "#10B981",
    "#F59E0B",
    "#EF4444",
    "#8B5CF6",
    "#06B6D4",
    "#84CC16",
    "#F97316",
    "#EC4899",
    "#6B7280",
)

ALL_WAREHOUSES = "All Warehouses"
UNKNOWN_WAREHOUSE = "Unknown Warehouse"


def _stock_cells(
    snapshot: InventorySnapshot, warehouse_id: Optional[int]
) -> List[Tuple[ProductRow, LocationRow, int]]:
    """(商品, 库位, 数量) 三元组：启用商品、数量 > 0，按 商品名 → 库位名 排序。"""
    products: Dict[int, ProductRow] = {p.id: p for p in snapshot.products if p.active}
    qty: Dict[Tuple[int, int], int] = {}
    for r in snapshot.records:
        if warehouse_id is not None and r.location_id != warehouse_id:
            continue
        if r.product_id not in products or r.location_id not in snapshot.locations:
            continue
        key = (r.product_id, r.location_id)
        qty[key] = qty.get(key, 0) + int(r.quantity_on_hand)

    cells = [
        (products[pid], snapshot.locations[lid], q)
        for (pid, lid), q in qty.items()
        if q > 0
    ]
    cells.sort(key=lambda c: (c[0].name, c[0].id, c[1].name, c[1].id))
    return cells


def build_chart_products(
    snapshot: InventorySnapshot, warehouse_id: Optional[int] = None
) -> List[StockVisualizationProduct]:
    # 颜色按库位首次出现的顺序分配，超过色板长度后循环
    colors: Dict[int, str] = {}
    out: Dict[int, StockVisualizationProduct] = {}

    for product, loc, q in _stock_cells(snapshot, warehouse_id):
        if loc.id not in colors:
            colors[loc.id] = COLOR_PALETTE[len(colors) % len(COLOR_PALETTE)]
        item = out.get(product.id)
        if item is None:
            item = StockVisualizationProduct(
                product_id=product.id, product_name=product.name, sku=product.sku
            )
            out[product.id] = item
        item.warehouses.append(
            WarehouseStockPoint(
                warehouse_id=loc.id,
                warehouse_name=loc.name,
                quantity=q,
                color=colors[loc.id],
            )
        )

    return list(out.values())


def warehouse_filter_echo(
    snapshot: InventorySnapshot, warehouse_id: Optional[int]
) -> WarehouseFilterEcho:
    if warehouse_id is None:
        return WarehouseFilterEcho(warehouse_name=ALL_WAREHOUSES)
    loc = snapshot.locations.get(warehouse_id)
    return WarehouseFilterEcho(
        warehouse_id=warehouse_id,
        warehouse_name=loc.name if loc is not None else UNKNOWN_WAREHOUSE,
    )


def build_stock_visualization(
    snapshot: InventorySnapshot, warehouse_id: Optional[int] = None, *, now: datetime
) -> StockVisualizationResponse:
    return StockVisualizationResponse(
        products=build_chart_products(snapshot, warehouse_id),
        chart_config=ChartConfig(color_palette=list(COLOR_PALETTE)),
        filters=warehouse_filter_echo(snapshot, warehouse_id),
        last_updated=now,
    )


def build_top_products_by_stock(
    snapshot: InventorySnapshot, limit: int = 10, warehouse_id: Optional[int] = None
) -> List[StockVisualizationProduct]:
    products = build_chart_products(snapshot, warehouse_id)
    products.sort(key=lambda p: (-sum(w.quantity for w in p.warehouses), p.product_name, p.product_id))
    return products[: max(limit, 0)]


class StockVisualizationService:
    """按 商品 × 仓库 的库存图表数据。"""

    def __init__(self, source: DashboardDataSource):
        self.source = source

    async def get_stock_visualization(
        self, warehouse_id: Optional[int] = None, *, now: datetime
    ) -> StockVisualizationResponse:
        snapshot = await self.source.load_inventory(warehouse_id=warehouse_id)
        return build_stock_visualization(snapshot, warehouse_id, now=now)

    async def get_top_products_by_stock(
        self, limit: int = 10, warehouse_id: Optional[int] = None
    ) -> List[StockVisualizationProduct]:
        snapshot = await self.source.load_inventory(warehouse_id=warehouse_id)
        return build_top_products_by_stock(snapshot, limit, warehouse_id)
