# app/schemas/purchase_orders.py
from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel


class PurchaseSupplierRef(BaseModel):
    id: int
    name: str
    contact_name: Optional[str] = None


class RecentPurchaseOrder(BaseModel):
    id: int
    po_number: str
    supplier: PurchaseSupplierRef
    order_date: date
    expected_delivery_date: Optional[date] = None
    status: str
    product_count: int
    total_amount: float
    is_overdue: bool


class RecentPurchasesResponse(BaseModel):
    recent_orders: List[RecentPurchaseOrder]
