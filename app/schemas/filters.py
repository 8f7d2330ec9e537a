# app/schemas/filters.py
"""
聚合接口的过滤 / 分页值对象。

HTTP 层负责解析与范围校验，这里只定义形状；frozen 保证作为缓存 key 来源时不可变。
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import PurchaseOrderStatus, StockFilter


class _Filter(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    def key_fields(self) -> Dict[str, Any]:
        """用于 canonical_key 的字段（JSON 形态：枚举取值、日期转 ISO）。"""
        return self.model_dump(mode="json")


class StockLevelsFilters(_Filter):
    warehouse_id: Optional[int] = None
    stock_filter: StockFilter = StockFilter.ALL
    search: Optional[str] = None
    category: Optional[str] = None


class PaginationParams(_Filter):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=50, ge=1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class WarehouseDistributionFilters(_Filter):
    warehouse_id: Optional[int] = None
    product_id: Optional[int] = None
    category: Optional[str] = None
    min_value: Optional[float] = Field(default=None, ge=0)


class PurchaseOrderFilters(_Filter):
    supplier_id: Optional[int] = None
    status: Optional[PurchaseOrderStatus] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
