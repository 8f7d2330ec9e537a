# app/services/stock_levels_service.py
from __future__ import annotations

from typing import List, Optional

from app.domain.ports import DashboardDataSource
from app.domain.rows import InventorySnapshot
from app.models.enums import StockFilter
from app.schemas.filters import PaginationParams, StockLevelsFilters
from app.schemas.stock_levels import StockLevelItem, StockLevelsFilterEcho, StockLevelsResponse
from app.services import stock_aggregation as agg


def build_stock_levels(
    snapshot: InventorySnapshot,
    filters: StockLevelsFilters,
    pagination: Optional[PaginationParams] = None,
) -> StockLevelsResponse:
    """
    纯计算部分（可直接用内存快照测试）：
    1) 启用商品 + search / category
    2) 库存行按仓过滤、按商品分组汇总
    3) 聚合后按 stock_filter 过滤
    4) 名称升序（id 作稳定次序）
    5) total 基于过滤后分组数独立计算，再切页
    """
    products = agg.select_products(
        snapshot.products, search=filters.search, category=filters.category
    )
    records = agg.restrict_records(snapshot.records, filters.warehouse_id)

    aggregates = [
        a
        for a in agg.aggregate_products(
            products, records, require_records=filters.warehouse_id is not None
        )
        if agg.matches_stock_filter(a.stock_status, filters.stock_filter)
    ]
    aggregates = agg.sort_by_name(aggregates)

    meta = None
    page_rows = aggregates
    if pagination is not None:
        meta = agg.pagination_meta(page=pagination.page, limit=pagination.limit, total=len(aggregates))
        page_rows = agg.paginate(aggregates, page=pagination.page, limit=pagination.limit)

    items = [
        StockLevelItem(
            id=a.product.id,
            sku=a.product.sku,
            name=a.product.name,
            category=a.product.category,
            image_url=a.product.image_url,
            total_quantity=a.total_quantity,
            unit_cost=a.avg_unit_cost,
            total_value=a.total_value,
            reorder_point=a.product.reorder_point,
            stock_status=a.stock_status,
            locations=agg.location_breakdown(a.records, snapshot.locations, filters.warehouse_id),
        )
        for a in page_rows
    ]

    return StockLevelsResponse(
        products=items,
        filters=StockLevelsFilterEcho(
            warehouse_id=filters.warehouse_id,
            stock_filter=filters.stock_filter,
            search=filters.search,
            category=filters.category,
        ),
        pagination=meta,
    )


class StockLevelsService:
    """库存列表：跨库位按商品汇总，支持过滤 / 搜索 / 分页。"""

    def __init__(self, source: DashboardDataSource):
        self.source = source

    async def get_stock_levels(
        self,
        filters: Optional[StockLevelsFilters] = None,
        pagination: Optional[PaginationParams] = None,
    ) -> StockLevelsResponse:
        filters = filters or StockLevelsFilters()
        snapshot = await self.source.load_inventory(warehouse_id=filters.warehouse_id)
        return build_stock_levels(snapshot, filters, pagination)

    async def get_products_by_stock_status(
        self, status: StockFilter, warehouse_id: Optional[int] = None
    ) -> List[StockLevelItem]:
        resp = await self.get_stock_levels(
            StockLevelsFilters(stock_filter=status, warehouse_id=warehouse_id)
        )
        return resp.products

    async def get_low_stock_products(self, warehouse_id: Optional[int] = None) -> List[StockLevelItem]:
        return await self.get_products_by_stock_status(StockFilter.LOW_STOCK, warehouse_id)

    async def get_out_of_stock_products(
        self, warehouse_id: Optional[int] = None
    ) -> List[StockLevelItem]:
        return await self.get_products_by_stock_status(StockFilter.OUT_OF_STOCK, warehouse_id)

    async def get_product_stock_levels(self, product_id: int) -> Optional[StockLevelItem]:
        resp = await self.get_stock_levels(StockLevelsFilters())
        for item in resp.products:
            if item.id == product_id:
                return item
        return None

    async def search_products(
        self,
        term: str,
        filters: Optional[StockLevelsFilters] = None,
        pagination: Optional[PaginationParams] = None,
    ) -> StockLevelsResponse:
        base = filters or StockLevelsFilters()
        return await self.get_stock_levels(base.model_copy(update={"search": term}), pagination)
