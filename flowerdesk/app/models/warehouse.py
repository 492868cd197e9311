"""Warehouse stock of cut flowers and the write-off history."""
from datetime import datetime

from sqlalchemy import String, Integer, DateTime, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from flowerdesk.app.core.base import Base


class FlowerStock(Base):
    """One row per flower name. Orders, bouquets and write-offs refer to it by name."""
    __tablename__ = 'warehouse'
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column('flower', String(255), unique=True)
    quantity: Mapped[int] = mapped_column('amount', Integer, default=0)
    updated_at: Mapped[datetime] = mapped_column('date_time', DateTime, default=datetime.now)

    __table_args__ = (
        CheckConstraint('amount >= 0', name='ck_warehouse_amount_non_negative'),
    )


class WriteOff(Base):
    """Write-off record: wilted or broken flowers thrown away."""
    __tablename__ = 'writeoffs'
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    flower_name: Mapped[str] = mapped_column('flower', String(255))
    quantity: Mapped[int] = mapped_column('amount', Integer)
    created_at: Mapped[datetime] = mapped_column('date_time', DateTime, default=datetime.now)

    __table_args__ = (Index('ix_writeoffs_date_time', 'date_time'),)
