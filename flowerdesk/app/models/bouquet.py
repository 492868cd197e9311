"""Showcase bouquets assembled from warehouse stock."""
from datetime import datetime
from typing import Optional

from sqlalchemy import String, ForeignKey, Integer, DateTime, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from flowerdesk.app.core.base import Base


class Bouquet(Base):
    """Ready-made bouquet waiting on the showcase. Photo is a base64 data URL."""
    __tablename__ = 'bouquets'
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    description: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column('date_time', DateTime, default=datetime.now)
    photo: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class BouquetItem(Base):
    __tablename__ = 'bouquet_items'
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    bouquet_id: Mapped[int] = mapped_column(ForeignKey('bouquets.id', ondelete='CASCADE'))
    flower_name: Mapped[str] = mapped_column('flower', String(255))
    quantity: Mapped[int] = mapped_column('amount', Integer)

    __table_args__ = (Index('ix_bouquet_items_bouquet_id', 'bouquet_id'),)
