# app/schemas/warehouse_distribution.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class WarehouseProductEntry(BaseModel):
    product_id: int
    sku: str
    name: str
    quantity: int
    unit_cost: Optional[float] = None
    total_value: float


class WarehouseDistributionItem(BaseModel):
    warehouse_id: int
    warehouse_name: str
    warehouse_address: Optional[str] = None
    total_products: int = 0
    total_quantity: int = 0
    total_value: float = 0.0
    # 单价为空/<=0 的库存行数（不计价）
    excluded_records: int = 0
    products: List[WarehouseProductEntry] = []


class WarehouseDistributionResponse(BaseModel):
    warehouses: List[WarehouseDistributionItem]


class ImbalanceLocation(BaseModel):
    warehouse_id: int
    warehouse_name: str
    quantity: int
    percentage: float


class TransferSuggestion(BaseModel):
    from_warehouse_id: int
    to_warehouse_id: int
    suggested_quantity: int


class StockImbalance(BaseModel):
    product_id: int
    sku: str
    name: str
    total_stock: int
    locations: List[ImbalanceLocation]
    imbalance_score: float
    suggested_transfers: List[TransferSuggestion] = []


class WarehouseSummaryStats(BaseModel):
    total_warehouses: int = 0
    total_products: int = 0
    total_value: float = 0.0
    average_value_per_warehouse: float = 0.0
    warehouses_with_inventory: int = 0
