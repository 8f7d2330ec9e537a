# app/models/product.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.base import Base

if TYPE_CHECKING:
    from app.models.stock_record import StockRecord


class Product(Base):
    """
    商品主档：
    - sku 全局唯一
    - reorder_point：补货点（>=0），汇总库存低于它即视为 low_stock
    - 库存状态不落库，按 product_locations 实时汇总计算
    """

    __tablename__ = "products"
    __table_args__ = (
        sa.CheckConstraint("sale_price >= 0", name="ck_products_sale_price_nonneg"),
        sa.CheckConstraint("cost_price >= 0", name="ck_products_cost_price_nonneg"),
        sa.CheckConstraint("reorder_point >= 0", name="ck_products_reorder_point_nonneg"),
    )

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    sku: Mapped[str] = mapped_column(sa.String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(sa.String(255), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)
    category: Mapped[str] = mapped_column(sa.String(100), nullable=False, index=True)

    sale_price: Mapped[Decimal] = mapped_column(sa.Numeric(10, 2), nullable=False)
    cost_price: Mapped[Decimal] = mapped_column(sa.Numeric(10, 2), nullable=False)
    reorder_point: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)

    image_url: Mapped[Optional[str]] = mapped_column(sa.String(500), nullable=True)
    active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True, index=True)

    stock_records: Mapped[List["StockRecord"]] = relationship(
        "StockRecord",
        back_populates="product",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r} name={self.name!r}>"
