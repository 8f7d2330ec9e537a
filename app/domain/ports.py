# -*- coding: utf-8 -*-
from __future__ import annotations

from typing import Optional, Protocol

from app.domain.rows import InventorySnapshot, PurchasingSnapshot


class DashboardDataSource(Protocol):
    """
    聚合引擎唯一的 IO 边界（只读）。

    每个聚合 / 打分操作只 await 其中一个方法一次，之后全部同步计算。
    实现方需要把存储层异常统一包装成 DataSourceError。
    """

    async def load_inventory(
        self,
        *,
        warehouse_id: Optional[int] = None,
        with_suppliers: bool = False,
    ) -> InventorySnapshot: ...

    async def load_purchasing(
        self,
        *,
        supplier_id: Optional[int] = None,
        active_only: bool = False,
    ) -> PurchasingSnapshot: ...
