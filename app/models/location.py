# app/models/location.py
from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

if TYPE_CHECKING:
    from app.models.stock_record import StockRecord


class Location(Base):
    """
    仓库/库位主档（Dashboard 里的 "warehouse" 即本表一行）。
    只被 product_locations 引用，不拥有库存行。
    """

    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(sa.String(255), nullable=False, index=True)
    address: Mapped[Optional[str]] = mapped_column(sa.Text, nullable=True)
    city: Mapped[Optional[str]] = mapped_column(sa.String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(sa.String(50), nullable=True)
    zip_code: Mapped[Optional[str]] = mapped_column(sa.String(20), nullable=True)

    # main / secondary / distribution / storage
    warehouse_type: Mapped[str] = mapped_column(sa.String(32), nullable=False, default="main")
    active: Mapped[bool] = mapped_column(sa.Boolean, nullable=False, default=True, index=True)

    stock_records: Mapped[List["StockRecord"]] = relationship(
        "StockRecord",
        back_populates="location",
        passive_deletes=True,
    )

    def __repr__(self) -> str:  # 便于调试与日志
        return f"<Location id={self.id} name={self.name!r}>"
