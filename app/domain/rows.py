# app/domain/rows.py
"""
存储层交给聚合引擎的原始行（只读值对象）。

聚合 / 打分函数只依赖这些 dataclass，不依赖 ORM / Session，
因此可以直接用内存数据做单测。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional


@dataclass(frozen=True)
class ProductRow:
    id: int
    sku: str
    name: str
    category: str
    sale_price: float
    cost_price: float
    reorder_point: int
    active: bool = True
    image_url: Optional[str] = None


@dataclass(frozen=True)
class LocationRow:
    id: int
    name: str
    address: Optional[str] = None
    active: bool = True


@dataclass(frozen=True)
class StockRecordRow:
    product_id: int
    location_id: int
    quantity_on_hand: int
    unit_cost: Optional[float] = None

    @property
    def has_cost(self) -> bool:
        # 为空 / <=0 的单价不参与库存价值
        return self.unit_cost is not None and self.unit_cost > 0

    @property
    def value(self) -> float:
        return self.quantity_on_hand * self.unit_cost if self.has_cost else 0.0


@dataclass(frozen=True)
class SupplierRow:
    id: int
    name: str
    active: bool = True
    supplier_type: str = "supplier"
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


@dataclass(frozen=True)
class PurchaseOrderRow:
    id: int
    po_number: str
    supplier_id: int
    order_date: date
    status: str
    total_amount: float
    expected_delivery_date: Optional[date] = None
    completed_at: Optional[datetime] = None
    line_count: int = 0


@dataclass(frozen=True)
class InventorySnapshot:
    """
    一次 load_inventory 的结果：
    - products   全部商品（含停用，由聚合层过滤）
    - records    库存行（传了 warehouse_id 时只含该仓）
    - locations  id → LocationRow
    - suppliers  仅 with_suppliers=True 时加载
    """

    products: List[ProductRow] = field(default_factory=list)
    records: List[StockRecordRow] = field(default_factory=list)
    locations: Dict[int, LocationRow] = field(default_factory=dict)
    suppliers: List[SupplierRow] = field(default_factory=list)


@dataclass(frozen=True)
class PurchasingSnapshot:
    suppliers: List[SupplierRow] = field(default_factory=list)
    orders: List[PurchaseOrderRow] = field(default_factory=list)

    def orders_of(self, supplier_id: int) -> List[PurchaseOrderRow]:
        return [o for o in self.orders if o.supplier_id == supplier_id]

    def supplier(self, supplier_id: int) -> Optional[SupplierRow]:
        for s in self.suppliers:
            if s.id == supplier_id:
                return s
        return None
