# app/models/enums.py
from __future__ import annotations

from enum import Enum


class StockStatus(str, Enum):
    """
    商品库存状态（按商品汇总数量实时计算，不落库）：

    - ADEQUATE      数量 >= reorder_point
    - LOW_STOCK     0 < 数量 < reorder_point
    - OUT_OF_STOCK  数量 == 0
    """

    ADEQUATE = "adequate"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class StockFilter(str, Enum):
    """库存列表的状态过滤（聚合之后再判定）。"""

    ALL = "all"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class MetricStatus(str, Enum):
    """Dashboard 指标的严重程度。"""

    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


class PurchaseOrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# 已结束的采购单，不再判定逾期
CLOSED_ORDER_STATUSES = frozenset({PurchaseOrderStatus.DELIVERED, PurchaseOrderStatus.CANCELLED})


class LocationType(str, Enum):
    MAIN = "main"
    SECONDARY = "secondary"
    DISTRIBUTION = "distribution"
    STORAGE = "storage"
