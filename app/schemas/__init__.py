# app/schemas/__init__.py
"""
Schemas package

不做聚合导出，需要时从具体模块显式导入，例如：
    from app.schemas.filters import StockLevelsFilters
    from app.schemas.summary_metrics import SummaryMetrics
"""

__all__: list[str] = []
