# app/schemas/stock_levels.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import StockFilter, StockStatus


class StockLocationBreakdown(BaseModel):
    location_id: int
    location_name: str
    quantity: int
    unit_cost: Optional[float] = None


class StockLevelItem(BaseModel):
    """
    单个商品的库存汇总：
    - total_quantity   各库位 quantity_on_hand 之和
    - unit_cost        参与汇总库位的平均单价；无库存行时回退为 cost_price
    - total_value      Σ(quantity_on_hand × unit_cost)
    - stock_status     adequate / low_stock / out_of_stock
    - locations        有货库位明细（按库位名排序）
    """

    id: int
    sku: str
    name: str
    category: str
    image_url: Optional[str] = None
    total_quantity: int
    unit_cost: float
    total_value: float
    reorder_point: int
    stock_status: StockStatus
    locations: List[StockLocationBreakdown] = []


class PaginationMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int = Field(serialization_alias="totalPages")
    has_next: bool = Field(serialization_alias="hasNext")
    has_prev: bool = Field(serialization_alias="hasPrev")


class StockLevelsFilterEcho(BaseModel):
    warehouse_id: Optional[int] = None
    stock_filter: StockFilter = StockFilter.ALL
    search: Optional[str] = None
    category: Optional[str] = None


class StockLevelsResponse(BaseModel):
    products: List[StockLevelItem]
    filters: StockLevelsFilterEcho
    pagination: Optional[PaginationMeta] = None
