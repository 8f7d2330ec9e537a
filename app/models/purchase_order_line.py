# app/models/purchase_order_line.py
from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

if TYPE_CHECKING:
    from .purchase_order import PurchaseOrder


class PurchaseOrderLine(Base):
    __tablename__ = "purchase_order_lines"
    __table_args__ = (
        sa.CheckConstraint("quantity_ordered >= 0", name="ck_po_lines_qty_ordered_nonneg"),
        sa.CheckConstraint("quantity_received >= 0", name="ck_po_lines_qty_received_nonneg"),
    )

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)

    purchase_order_id: Mapped[int] = mapped_column(
        sa.Integer,
        sa.ForeignKey("purchase_orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[int] = mapped_column(
        sa.Integer,
        sa.ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    quantity_ordered: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    quantity_received: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    unit_price: Mapped[Decimal] = mapped_column(sa.Numeric(10, 2), nullable=False)

    order: Mapped["PurchaseOrder"] = relationship("PurchaseOrder", back_populates="lines")

    @property
    def line_amount(self) -> Decimal:
        return Decimal(self.quantity_ordered or 0) * (self.unit_price or Decimal("0"))

    def __repr__(self) -> str:
        return (
            f"<POLine po={self.purchase_order_id} product={self.product_id} "
            f"ordered={self.quantity_ordered} received={self.quantity_received}>"
        )
