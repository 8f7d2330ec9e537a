# app/models/__init__.py
"""
统一导出 ORM 模型。
"""

from importlib import import_module


def _export(module_name: str, class_name: str) -> None:
    module = import_module(module_name)
    globals()[class_name] = getattr(module, class_name)


MODEL_SPECS = [
    # -------- 商品 / 库存 --------
    ("app.models.product", "Product"),
    ("app.models.location", "Location"),
    ("app.models.stock_record", "StockRecord"),
    # -------- 采购 --------
    ("app.models.supplier", "Supplier"),
    ("app.models.purchase_order", "PurchaseOrder"),
    ("app.models.purchase_order_line", "PurchaseOrderLine"),
]

for _mod, _cls in MODEL_SPECS:
    _export(_mod, _cls)

__all__ = [cls for _, cls in MODEL_SPECS]
