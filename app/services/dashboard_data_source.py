# app/services/dashboard_data_source.py
"""
SQLAlchemy 实现的只读数据源：把 ORM 行转成 app.domain.rows 的值对象。

- 只读，不提交事务
- Decimal 统一转 float（聚合层只处理 float）
- 存储层异常统一包装为 DataSourceError
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.errors import DataSourceError
from app.domain.rows import (
    InventorySnapshot,
    LocationRow,
    ProductRow,
    PurchaseOrderRow,
    PurchasingSnapshot,
    StockRecordRow,
    SupplierRow,
)
from app.models.location import Location
from app.models.product import Product
from app.models.purchase_order import PurchaseOrder
from app.models.purchase_order_line import PurchaseOrderLine
from app.models.stock_record import StockRecord
from app.models.supplier import Supplier

log = logging.getLogger("dashboard.datasource")


def _f(v: Optional[Decimal]) -> Optional[float]:
    return float(v) if v is not None else None


def _supplier_row(s: Supplier) -> SupplierRow:
    return SupplierRow(
        id=s.id,
        name=s.name,
        active=bool(s.active),
        supplier_type=s.supplier_type,
        contact_name=s.contact_name,
        email=s.email,
        phone=s.phone,
        address=s.address,
        city=s.city,
        state=s.state,
        zip_code=s.zip_code,
    )


class SqlDashboardDataSource:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def load_inventory(
        self,
        *,
        warehouse_id: Optional[int] = None,
        with_suppliers: bool = False,
    ) -> InventorySnapshot:
        try:
            products = await self._products()
            records = await self._records(warehouse_id)
            locations = await self._locations()
            suppliers = await self._suppliers(active_only=False) if with_suppliers else []
        except (SQLAlchemyError, OSError) as e:
            log.error("load_inventory failed: warehouse_id=%s err=%s", warehouse_id, e, exc_info=True)
            raise DataSourceError("load_inventory") from e

        log.debug(
            "load_inventory: products=%d records=%d locations=%d suppliers=%d",
            len(products),
            len(records),
            len(locations),
            len(suppliers),
        )
        return InventorySnapshot(
            products=products, records=records, locations=locations, suppliers=suppliers
        )

    async def load_purchasing(
        self,
        *,
        supplier_id: Optional[int] = None,
        active_only: bool = False,
    ) -> PurchasingSnapshot:
        try:
            suppliers = await self._suppliers(active_only=active_only, supplier_id=supplier_id)
            orders = await self._orders(supplier_id)
        except (SQLAlchemyError, OSError) as e:
            log.error("load_purchasing failed: supplier_id=%s err=%s", supplier_id, e, exc_info=True)
            raise DataSourceError("load_purchasing") from e

        log.debug("load_purchasing: suppliers=%d orders=%d", len(suppliers), len(orders))
        return PurchasingSnapshot(suppliers=suppliers, orders=orders)

    # ---- queries ----

    async def _products(self) -> List[ProductRow]:
        res = await self.session.execute(select(Product).order_by(Product.id))
        return [
            ProductRow(
                id=p.id,
                sku=p.sku,
                name=p.name,
                category=p.category,
                sale_price=float(p.sale_price),
                cost_price=float(p.cost_price),
                reorder_point=int(p.reorder_point or 0),
                active=bool(p.active),
                image_url=p.image_url,
            )
            for p in res.scalars().all()
        ]

    async def _records(self, warehouse_id: Optional[int]) -> List[StockRecordRow]:
        stmt = select(
            StockRecord.product_id,
            StockRecord.location_id,
            StockRecord.quantity_on_hand,
            StockRecord.unit_cost,
        ).order_by(StockRecord.id)
        if warehouse_id is not None:
            stmt = stmt.where(StockRecord.location_id == int(warehouse_id))
        res = await self.session.execute(stmt)
        return [
            StockRecordRow(
                product_id=r.product_id,
                location_id=r.location_id,
                quantity_on_hand=int(r.quantity_on_hand),
                unit_cost=_f(r.unit_cost),
            )
            for r in res.all()
        ]

    async def _locations(self) -> Dict[int, LocationRow]:
        res = await self.session.execute(select(Location))
        return {
            loc.id: LocationRow(id=loc.id, name=loc.name, address=loc.address, active=bool(loc.active))
            for loc in res.scalars().all()
        }

    async def _suppliers(
        self, *, active_only: bool, supplier_id: Optional[int] = None
    ) -> List[SupplierRow]:
        stmt = select(Supplier).order_by(Supplier.id)
        if active_only:
            stmt = stmt.where(Supplier.active.is_(True))
        if supplier_id is not None:
            stmt = stmt.where(Supplier.id == int(supplier_id))
        res = await self.session.execute(stmt)
        return [_supplier_row(s) for s in res.scalars().all()]

    async def _orders(self, supplier_id: Optional[int]) -> List[PurchaseOrderRow]:
        line_count = func.count(PurchaseOrderLine.id).label("line_count")
        stmt = (
            select(PurchaseOrder, line_count)
            .outerjoin(PurchaseOrderLine, PurchaseOrderLine.purchase_order_id == PurchaseOrder.id)
            .group_by(PurchaseOrder.id)
            .order_by(PurchaseOrder.id)
        )
        if supplier_id is not None:
            stmt = stmt.where(PurchaseOrder.supplier_id == int(supplier_id))
        res = await self.session.execute(stmt)
        return [
            PurchaseOrderRow(
                id=po.id,
                po_number=po.po_number,
                supplier_id=po.supplier_id,
                order_date=po.order_date,
                status=po.status,
                total_amount=float(po.total_amount or 0),
                expected_delivery_date=po.expected_delivery_date,
                completed_at=po.completed_at,
                line_count=int(cnt or 0),
            )
            for po, cnt in res.all()
        ]
