"""SQLAlchemy-backed storage. One instance wraps one request-scoped AsyncSession."""
from datetime import datetime
from typing import Any, Iterable, Optional

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from flowerdesk.app.models import (
    Bouquet,
    BouquetItem,
    FlowerStock,
    Note,
    Order,
    OrderItem,
    WriteOff,
)
from flowerdesk.app.storage.base import Storage


class DatabaseStorage(Storage):
    """Writes are flushed immediately so ids are available; the caller commits."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _add(self, obj):
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def _update(self, obj, fields: dict):
        for key, value in fields.items():
            setattr(obj, key, value)
        await self.session.flush()
        return obj

    # --- warehouse ---
    async def list_flowers(self) -> list[FlowerStock]:
        result = await self.session.execute(select(FlowerStock).order_by(FlowerStock.id))
        return list(result.scalars().all())

    async def get_flower(self, flower_id: int) -> Optional[FlowerStock]:
        return await self.session.get(FlowerStock, flower_id)

    async def get_flower_by_name(self, name: str, for_update: bool = False) -> Optional[FlowerStock]:
        stmt = select(FlowerStock).where(FlowerStock.name == name)
        if for_update:
            # Re-read the locked row even if an older copy sits in the identity map
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def insert_flower(self, name: str, quantity: int) -> FlowerStock:
        return await self._add(FlowerStock(name=name, quantity=quantity, updated_at=datetime.now()))

    async def update_flower(self, flower: FlowerStock, **fields: Any) -> FlowerStock:
        fields.setdefault("updated_at", datetime.now())
        return await self._update(flower, fields)

    async def delete_flower(self, flower_id: int) -> bool:
        result = await self.session.execute(delete(FlowerStock).where(FlowerStock.id == flower_id))
        return result.rowcount > 0

    # --- write-offs ---
    async def list_writeoffs(self) -> list[WriteOff]:
        result = await self.session.execute(
            select(WriteOff).order_by(WriteOff.created_at.desc(), WriteOff.id.desc())
        )
        return list(result.scalars().all())

    async def insert_writeoff(self, flower_name: str, quantity: int) -> WriteOff:
        return await self._add(
            WriteOff(flower_name=flower_name, quantity=quantity, created_at=datetime.now())
        )

    async def delete_all_writeoffs(self) -> int:
        result = await self.session.execute(delete(WriteOff))
        return result.rowcount or 0

    # --- notes ---
    async def list_notes(self) -> list[Note]:
        result = await self.session.execute(select(Note).order_by(Note.updated_at.desc(), Note.id.desc()))
        return list(result.scalars().all())

    async def get_note(self, note_id: int) -> Optional[Note]:
        return await self.session.get(Note, note_id)

    async def insert_note(self, title: str, content: str) -> Note:
        return await self._add(Note(title=title, content=content, updated_at=datetime.now()))

    async def update_note(self, note: Note, **fields: Any) -> Note:
        fields.setdefault("updated_at", datetime.now())
        return await self._update(note, fields)

    async def delete_note(self, note_id: int) -> bool:
        result = await self.session.execute(delete(Note).where(Note.id == note_id))
        return result.rowcount > 0

    # --- orders ---
    async def list_orders(self, statuses: Optional[Iterable[str]] = None) -> list[Order]:
        stmt = select(Order)
        if statuses:
            stmt = stmt.where(Order.status.in_(list(statuses)))
        stmt = stmt.order_by(Order.scheduled_at.desc(), Order.id.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_order(self, order_id: int) -> Optional[Order]:
        return await self.session.get(Order, order_id)

    async def insert_order(self, **fields: Any) -> Order:
        return await self._add(Order(**fields))

    async def update_order(self, order: Order, **fields: Any) -> Order:
        return await self._update(order, fields)

    async def list_order_items(self, order_id: int) -> list[OrderItem]:
        result = await self.session.execute(
            select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.id)
        )
        return list(result.scalars().all())

    async def insert_order_item(self, order_id: int, flower_name: str, quantity: int) -> OrderItem:
        return await self._add(OrderItem(order_id=order_id, flower_name=flower_name, quantity=quantity))

    async def delete_order_items(self, order_id: int) -> int:
        result = await self.session.execute(delete(OrderItem).where(OrderItem.order_id == order_id))
        return result.rowcount or 0

    # --- bouquets ---
    async def list_bouquets(self) -> list[Bouquet]:
        result = await self.session.execute(
            select(Bouquet).order_by(Bouquet.created_at.desc(), Bouquet.id.desc())
        )
        return list(result.scalars().all())

    async def get_bouquet(self, bouquet_id: int) -> Optional[Bouquet]:
        return await self.session.get(Bouquet, bouquet_id)

    async def insert_bouquet(self, description: str, photo: Optional[str]) -> Bouquet:
        return await self._add(Bouquet(description=description, photo=photo, created_at=datetime.now()))

    async def update_bouquet(self, bouquet: Bouquet, **fields: Any) -> Bouquet:
        return await self._update(bouquet, fields)

    async def delete_bouquet(self, bouquet_id: int) -> bool:
        await self.session.execute(delete(BouquetItem).where(BouquetItem.bouquet_id == bouquet_id))
        result = await self.session.execute(delete(Bouquet).where(Bouquet.id == bouquet_id))
        return result.rowcount > 0

    async def list_bouquet_items(self, bouquet_id: int) -> list[BouquetItem]:
        result = await self.session.execute(
            select(BouquetItem).where(BouquetItem.bouquet_id == bouquet_id).order_by(BouquetItem.id)
        )
        return list(result.scalars().all())

    async def insert_bouquet_item(self, bouquet_id: int, flower_name: str, quantity: int) -> BouquetItem:
        return await self._add(BouquetItem(bouquet_id=bouquet_id, flower_name=flower_name, quantity=quantity))

    # --- unit of work ---
    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
