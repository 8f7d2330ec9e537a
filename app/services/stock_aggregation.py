# app/services/stock_aggregation.py
"""
库存聚合流水线（纯函数，无 IO）：

    select_products → restrict_records → group_by_product
      → aggregate_group（汇总 + 状态判定） → matches_stock_filter（聚合后过滤）
      → sort → paginate

状态过滤必须在聚合之后做：商品的状态取决于各库位数量之和，而不是某一行。
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from app.domain.rows import LocationRow, ProductRow, StockRecordRow
from app.models.enums import StockFilter, StockStatus
from app.schemas.stock_levels import PaginationMeta, StockLocationBreakdown


@dataclass(frozen=True)
class ProductAggregate:
    product: ProductRow
    total_quantity: int
    avg_unit_cost: float
    total_value: float
    stock_status: StockStatus
    records: Tuple[StockRecordRow, ...] = field(default=())


# ---------------------------------------------------------------------------
# 1) 过滤
# ---------------------------------------------------------------------------


def matches_search(product: ProductRow, search: Optional[str]) -> bool:
    """name / sku / category 任一包含 search（大小写不敏感）。"""
    if not search:
        return True
    needle = search.casefold()
    return any(needle in (v or "").casefold() for v in (product.name, product.sku, product.category))


def select_products(
    products: Iterable[ProductRow],
    *,
    search: Optional[str] = None,
    category: Optional[str] = None,
) -> List[ProductRow]:
    out: List[ProductRow] = []
    for p in products:
        if not p.active:
            continue
        if category and p.category != category:
            continue
        if not matches_search(p, search):
            continue
        out.append(p)
    return out


def restrict_records(
    records: Iterable[StockRecordRow], warehouse_id: Optional[int]
) -> List[StockRecordRow]:
    if warehouse_id is None:
        return list(records)
    return [r for r in records if r.location_id == warehouse_id]


# ---------------------------------------------------------------------------
# 2) 分组 + 汇总
# ---------------------------------------------------------------------------


def group_by_product(
    records: Iterable[StockRecordRow],
) -> Dict[int, List[StockRecordRow]]:
    groups: Dict[int, List[StockRecordRow]] = {}
    for r in records:
        groups.setdefault(r.product_id, []).append(r)
    return groups


def classify_stock_status(quantity: int, reorder_point: int) -> StockStatus:
    if quantity == 0:
        return StockStatus.OUT_OF_STOCK
    if quantity < reorder_point:
        return StockStatus.LOW_STOCK
    return StockStatus.ADEQUATE


def aggregate_group(product: ProductRow, records: Sequence[StockRecordRow]) -> ProductAggregate:
    """
    - total_quantity = Σ quantity_on_hand
    - avg_unit_cost  = avg(unit_cost)，只算有单价的行；没有参与行时回退 cost_price
    - total_value    = Σ quantity_on_hand × unit_cost（单价为空的行按 0 计）
    """
    total_quantity = sum(int(r.quantity_on_hand) for r in records)

    costs = [float(r.unit_cost) for r in records if r.unit_cost is not None]
    if costs:
        avg_unit_cost = sum(costs) / len(costs)
    else:
        avg_unit_cost = float(product.cost_price)

    total_value = sum(
        r.quantity_on_hand * float(r.unit_cost) for r in records if r.unit_cost is not None
    )

    return ProductAggregate(
        product=product,
        total_quantity=total_quantity,
        avg_unit_cost=avg_unit_cost,
        total_value=float(total_value),
        stock_status=classify_stock_status(total_quantity, int(product.reorder_point)),
        records=tuple(records),
    )


def aggregate_products(
    products: Iterable[ProductRow],
    records: Iterable[StockRecordRow],
    *,
    require_records: bool = False,
) -> List[ProductAggregate]:
    """require_records=True：按仓过滤时，该仓没有库存行的商品不出现在结果里。"""
    groups = group_by_product(records)
    return [
        aggregate_group(p, groups.get(p.id, []))
        for p in products
        if not require_records or p.id in groups
    ]


# ---------------------------------------------------------------------------
# 3) 聚合后过滤 / 排序
# ---------------------------------------------------------------------------


def matches_stock_filter(status: StockStatus, stock_filter: StockFilter) -> bool:
    if stock_filter is StockFilter.ALL:
        return True
    if stock_filter is StockFilter.LOW_STOCK:
        return status is StockStatus.LOW_STOCK
    if stock_filter is StockFilter.OUT_OF_STOCK:
        return status is StockStatus.OUT_OF_STOCK
    raise ValueError(f"unknown stock filter: {stock_filter!r}")


def sort_by_name(aggregates: Iterable[ProductAggregate]) -> List[ProductAggregate]:
    return sorted(aggregates, key=lambda a: (a.product.name, a.product.id))


def location_breakdown(
    records: Iterable[StockRecordRow],
    locations: Dict[int, LocationRow],
    warehouse_id: Optional[int] = None,
) -> List[StockLocationBreakdown]:
    """有货库位（qty > 0）明细，按库位名排序；库位主档缺失的行跳过。"""
    rows: List[StockLocationBreakdown] = []
    for r in records:
        if r.quantity_on_hand <= 0:
            continue
        if warehouse_id is not None and r.location_id != warehouse_id:
            continue
        loc = locations.get(r.location_id)
        if loc is None:
            continue
        rows.append(
            StockLocationBreakdown(
                location_id=loc.id,
                location_name=loc.name,
                quantity=int(r.quantity_on_hand),
                unit_cost=float(r.unit_cost) if r.unit_cost is not None else None,
            )
        )
    rows.sort(key=lambda b: (b.location_name, b.location_id))
    return rows


# ---------------------------------------------------------------------------
# 4) 分页
# ---------------------------------------------------------------------------


def pagination_meta(*, page: int, limit: int, total: int) -> PaginationMeta:
    total_pages = math.ceil(total / limit) if total > 0 else 0
    return PaginationMeta(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


def paginate(items: Sequence, *, page: int, limit: int) -> list:
    offset = (page - 1) * limit
    return list(items[offset : offset + limit])
