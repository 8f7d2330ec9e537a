# app/models/stock_record.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.base import Base


class StockRecord(Base):
    """
    库存余额维度 (product_id, location_id)

    - quantity_on_hand 为唯一真实库存来源（>=0）
    - unit_cost 可为空：为空 / <=0 的行不计入库存价值
    """

    __tablename__ = "product_locations"
    __table_args__ = (
        sa.UniqueConstraint("product_id", "location_id", name="uq_product_locations_product_loc"),
        sa.CheckConstraint("quantity_on_hand >= 0", name="ck_product_locations_qty_nonneg"),
        sa.CheckConstraint("unit_cost IS NULL OR unit_cost >= 0", name="ck_product_locations_cost_nonneg"),
        sa.Index("ix_product_locations_location_product", "location_id", "product_id"),
    )

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)

    product_id: Mapped[int] = mapped_column(
        sa.Integer,
        sa.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    location_id: Mapped[int] = mapped_column(
        sa.Integer,
        sa.ForeignKey("locations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    quantity_on_hand: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    unit_cost: Mapped[Optional[Decimal]] = mapped_column(sa.Numeric(10, 2), nullable=True)

    last_updated: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    product = relationship("Product", back_populates="stock_records")
    location = relationship("Location", back_populates="stock_records")

    def __repr__(self) -> str:
        return (
            f"<StockRecord product={self.product_id} loc={self.location_id} "
            f"qty={self.quantity_on_hand} unit_cost={self.unit_cost}>"
        )
