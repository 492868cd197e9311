from datetime import datetime
from typing import Optional

from sqlalchemy import String, ForeignKey, Integer, DateTime, Text, Index, Boolean
from sqlalchemy.orm import Mapped, mapped_column

from flowerdesk.app.core.base import Base
from flowerdesk.app.core.constants import OrderStatus


class Order(Base):
    __tablename__ = 'orders'
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    sender: Mapped[str] = mapped_column('from', Text)
    recipient: Mapped[str] = mapped_column('to', Text)
    address: Mapped[str] = mapped_column(Text)
    scheduled_at: Mapped[datetime] = mapped_column('date_time', DateTime)
    time_from: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)  # "10:00"
    time_to: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)  # "12:00"
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(50), default=OrderStatus.NEW.value)
    is_pickup: Mapped[bool] = mapped_column('pickup', Boolean, default=False)
    is_showcase: Mapped[bool] = mapped_column('showcase', Boolean, default=False)

    __table_args__ = (
        Index('ix_orders_status', 'status'),
        Index('ix_orders_date_time', 'date_time'),
    )


class OrderItem(Base):
    """Order line: flower name + quantity reserved from the warehouse."""
    __tablename__ = 'order_items'
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(ForeignKey('orders.id', ondelete='CASCADE'))
    flower_name: Mapped[str] = mapped_column('flower', String(255))
    quantity: Mapped[int] = mapped_column('amount', Integer)

    __table_args__ = (Index('ix_order_items_order_id', 'order_id'),)
