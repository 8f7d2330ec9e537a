# app/models/purchase_order.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.base import Base

if TYPE_CHECKING:
    from app.models.purchase_order_line import PurchaseOrderLine
    from app.models.supplier import Supplier


class PurchaseOrder(Base):
    """
    采购单头表

    说明：
    - 行级数量/单价以 purchase_order_lines 为准；
    - 头表只表达单据级别信息：
        * 供应商
        * 下单日期 / 预计到货日期
        * 状态（pending / confirmed / shipped / delivered / cancelled）
        * 汇总金额
        * 完成时间（status=delivered 时写入，用于供应商准时率）
    """

    __tablename__ = "purchase_orders"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    po_number: Mapped[str] = mapped_column(sa.String(100), nullable=False, unique=True)

    supplier_id: Mapped[int] = mapped_column(
        sa.Integer,
        sa.ForeignKey("suppliers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    order_date: Mapped[date] = mapped_column(sa.Date, nullable=False, index=True)
    expected_delivery_date: Mapped[Optional[date]] = mapped_column(sa.Date, nullable=True, index=True)

    status: Mapped[str] = mapped_column(sa.String(32), nullable=False, default="pending", index=True)

    total_amount: Mapped[Decimal] = mapped_column(
        sa.Numeric(12, 2),
        nullable=False,
        default=Decimal("0"),
        comment="PO 汇总金额",
    )

    # 完成时间（到货）
    completed_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True), nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    supplier: Mapped["Supplier"] = relationship("Supplier", back_populates="purchase_orders")

    # 多行关联
    lines: Mapped[List["PurchaseOrderLine"]] = relationship(
        "PurchaseOrderLine",
        back_populates="order",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        sa.CheckConstraint("total_amount >= 0", name="ck_purchase_orders_total_nonneg"),
        sa.Index("ix_purchase_orders_supplier_status", "supplier_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<PO id={self.id} po_number={self.po_number!r} supplier={self.supplier_id} "
            f"status={self.status} total_amount={self.total_amount}>"
        )
