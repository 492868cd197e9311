"""
Storage interface used by the services.

Implementations only read and write rows; every piece of inventory arithmetic
lives in the services. A storage instance is a unit of work: nothing is durable
until ``commit()``, and ``rollback()`` discards everything since the last commit.
"""
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

from flowerdesk.app.models import (
    Bouquet,
    BouquetItem,
    FlowerStock,
    Note,
    Order,
    OrderItem,
    WriteOff,
)


class Storage(ABC):

    # --- warehouse ---
    @abstractmethod
    async def list_flowers(self) -> list[FlowerStock]:
        ...

    @abstractmethod
    async def get_flower(self, flower_id: int) -> Optional[FlowerStock]:
        ...

    @abstractmethod
    async def get_flower_by_name(self, name: str, for_update: bool = False) -> Optional[FlowerStock]:
        """Exact, case-sensitive lookup. ``for_update`` locks the row where the backend supports it."""

    @abstractmethod
    async def insert_flower(self, name: str, quantity: int) -> FlowerStock:
        ...

    @abstractmethod
    async def update_flower(self, flower: FlowerStock, **fields: Any) -> FlowerStock:
        ...

    @abstractmethod
    async def delete_flower(self, flower_id: int) -> bool:
        ...

    # --- write-offs ---
    @abstractmethod
    async def list_writeoffs(self) -> list[WriteOff]:
        """Newest first."""

    @abstractmethod
    async def insert_writeoff(self, flower_name: str, quantity: int) -> WriteOff:
        ...

    @abstractmethod
    async def delete_all_writeoffs(self) -> int:
        ...

    # --- notes ---
    @abstractmethod
    async def list_notes(self) -> list[Note]:
        """Newest first."""

    @abstractmethod
    async def get_note(self, note_id: int) -> Optional[Note]:
        ...

    @abstractmethod
    async def insert_note(self, title: str, content: str) -> Note:
        ...

    @abstractmethod
    async def update_note(self, note: Note, **fields: Any) -> Note:
        ...

    @abstractmethod
    async def delete_note(self, note_id: int) -> bool:
        ...

    # --- orders ---
    @abstractmethod
    async def list_orders(self, statuses: Optional[Iterable[str]] = None) -> list[Order]:
        """Ordered by scheduled date, latest first."""

    @abstractmethod
    async def get_order(self, order_id: int) -> Optional[Order]:
        ...

    @abstractmethod
    async def insert_order(self, **fields: Any) -> Order:
        ...

    @abstractmethod
    async def update_order(self, order: Order, **fields: Any) -> Order:
        ...

    @abstractmethod
    async def list_order_items(self, order_id: int) -> list[OrderItem]:
        ...

    @abstractmethod
    async def insert_order_item(self, order_id: int, flower_name: str, quantity: int) -> OrderItem:
        ...

    @abstractmethod
    async def delete_order_items(self, order_id: int) -> int:
        ...

    # --- bouquets ---
    @abstractmethod
    async def list_bouquets(self) -> list[Bouquet]:
        """Newest first."""

    @abstractmethod
    async def get_bouquet(self, bouquet_id: int) -> Optional[Bouquet]:
        ...

    @abstractmethod
    async def insert_bouquet(self, description: str, photo: Optional[str]) -> Bouquet:
        ...

    @abstractmethod
    async def update_bouquet(self, bouquet: Bouquet, **fields: Any) -> Bouquet:
        ...

    @abstractmethod
    async def delete_bouquet(self, bouquet_id: int) -> bool:
        """Delete the bouquet together with its items."""

    @abstractmethod
    async def list_bouquet_items(self, bouquet_id: int) -> list[BouquetItem]:
        ...

    @abstractmethod
    async def insert_bouquet_item(self, bouquet_id: int, flower_name: str, quantity: int) -> BouquetItem:
        ...

    # --- unit of work ---
    @abstractmethod
    async def commit(self) -> None:
        ...

    @abstractmethod
    async def rollback(self) -> None:
        ...
