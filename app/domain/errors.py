# app/domain/errors.py
from __future__ import annotations

from typing import Any, Dict, Optional


class DashboardError(Exception):
    code = "DASHBOARD_ERROR"
    status = 500

    def __init__(self, message: str, *, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class DataSourceError(DashboardError):
    """存储层读取失败（不解析具体数据库错误码）。"""

    code = "DATA_SOURCE_ERROR"
    status = 503

    def __init__(self, op: str, message: str = "data source unavailable"):
        super().__init__(f"{op}: {message}", context={"op": op})
        self.op = op


class SupplierNotFoundError(DashboardError):
    code = "SUPPLIER_NOT_FOUND"
    status = 404

    def __init__(self, supplier_id: int):
        super().__init__(f"supplier {supplier_id} not found", context={"supplier_id": supplier_id})
        self.supplier_id = supplier_id
