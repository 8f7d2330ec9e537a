# app/schemas/stock_visualization.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class WarehouseStockPoint(BaseModel):
    warehouse_id: int
    warehouse_name: str
    quantity: int
    color: str


class StockVisualizationProduct(BaseModel):
    product_id: int
    product_name: str
    sku: str
    warehouses: List[WarehouseStockPoint] = []


class ChartConfig(BaseModel):
    title: str = "Stock by Product per Warehouse"
    x_axis_label: str = "Products"
    y_axis_label: str = "Stock Quantity"
    color_palette: List[str] = []


class WarehouseFilterEcho(BaseModel):
    warehouse_id: Optional[int] = None
    warehouse_name: str


class StockVisualizationResponse(BaseModel):
    products: List[StockVisualizationProduct]
    chart_config: ChartConfig
    filters: WarehouseFilterEcho
    last_updated: datetime
