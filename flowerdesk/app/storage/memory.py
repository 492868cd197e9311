"""
In-memory storage for tests.

Each instance owns its own tables, so there is no state shared between tests.
Rows are transient model instances; commit/rollback work on snapshots, which is
enough to check that a failed operation leaves no trace.
"""
from datetime import datetime
from typing import Any, Iterable, Optional

from sqlalchemy import inspect

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

_TABLES = {
    "warehouse": FlowerStock,
    "writeoffs": WriteOff,
    "notes": Note,
    "orders": Order,
    "order_items": OrderItem,
    "bouquets": Bouquet,
    "bouquet_items": BouquetItem,
}


def _clone(row):
    """Detached copy of a model instance (column attributes only)."""
    mapper = inspect(type(row))
    return type(row)(**{attr.key: getattr(row, attr.key) for attr in mapper.column_attrs})


class MemoryStorage(Storage):

    def __init__(self) -> None:
        self._tables: dict[str, dict[int, Any]] = {name: {} for name in _TABLES}
        # Like database sequences, ids are not reused after a rollback
        self._next_id: dict[str, int] = {name: 1 for name in _TABLES}
        self._committed = self._snapshot()

    def _snapshot(self) -> dict[str, dict[int, Any]]:
        return {
            name: {pk: _clone(row) for pk, row in rows.items()}
            for name, rows in self._tables.items()
        }

    def _insert(self, table: str, **fields: Any):
        row = _TABLES[table](id=self._next_id[table], **fields)
        self._next_id[table] += 1
        self._tables[table][row.id] = row
        return row

    @staticmethod
    def _update(row, fields: dict):
        for key, value in fields.items():
            setattr(row, key, value)
        return row

    def _delete_where(self, table: str, predicate) -> int:
        rows = self._tables[table]
        doomed = [pk for pk, row in rows.items() if predicate(row)]
        for pk in doomed:
            del rows[pk]
        return len(doomed)

    # --- warehouse ---
    async def list_flowers(self) -> list[FlowerStock]:
        return sorted(self._tables["warehouse"].values(), key=lambda f: f.id)

    async def get_flower(self, flower_id: int) -> Optional[FlowerStock]:
        return self._tables["warehouse"].get(flower_id)

    async def get_flower_by_name(self, name: str, for_update: bool = False) -> Optional[FlowerStock]:
        for flower in self._tables["warehouse"].values():
            if flower.name == name:
                return flower
        return None

    async def insert_flower(self, name: str, quantity: int) -> FlowerStock:
        return self._insert("warehouse", name=name, quantity=quantity, updated_at=datetime.now())

    async def update_flower(self, flower: FlowerStock, **fields: Any) -> FlowerStock:
        fields.setdefault("updated_at", datetime.now())
        return self._update(flower, fields)

    async def delete_flower(self, flower_id: int) -> bool:
        return self._tables["warehouse"].pop(flower_id, None) is not None

    # --- write-offs ---
    async def list_writeoffs(self) -> list[WriteOff]:
        return sorted(self._tables["writeoffs"].values(), key=lambda w: (w.created_at, w.id), reverse=True)

    async def insert_writeoff(self, flower_name: str, quantity: int) -> WriteOff:
        return self._insert("writeoffs", flower_name=flower_name, quantity=quantity, created_at=datetime.now())

    async def delete_all_writeoffs(self) -> int:
        return self._delete_where("writeoffs", lambda row: True)

    # --- notes ---
    async def list_notes(self) -> list[Note]:
        return sorted(self._tables["notes"].values(), key=lambda n: (n.updated_at, n.id), reverse=True)

    async def get_note(self, note_id: int) -> Optional[Note]:
        return self._tables["notes"].get(note_id)

    async def insert_note(self, title: str, content: str) -> Note:
        return self._insert("notes", title=title, content=content, updated_at=datetime.now())

    async def update_note(self, note: Note, **fields: Any) -> Note:
        fields.setdefault("updated_at", datetime.now())
        return self._update(note, fields)

    async def delete_note(self, note_id: int) -> bool:
        return self._tables["notes"].pop(note_id, None) is not None

    # --- orders ---
    async def list_orders(self, statuses: Optional[Iterable[str]] = None) -> list[Order]:
        rows = list(self._tables["orders"].values())
        if statuses:
            wanted = set(statuses)
            rows = [o for o in rows if o.status in wanted]
        return sorted(rows, key=lambda o: (o.scheduled_at, o.id), reverse=True)

    async def get_order(self, order_id: int) -> Optional[Order]:
        return self._tables["orders"].get(order_id)

    async def insert_order(self, **fields: Any) -> Order:
        return self._insert("orders", **fields)

    async def update_order(self, order: Order, **fields: Any) -> Order:
        return self._update(order, fields)

    async def list_order_items(self, order_id: int) -> list[OrderItem]:
        return sorted(
            (i for i in self._tables["order_items"].values() if i.order_id == order_id),
            key=lambda i: i.id,
        )

    async def insert_order_item(self, order_id: int, flower_name: str, quantity: int) -> OrderItem:
        return self._insert("order_items", order_id=order_id, flower_name=flower_name, quantity=quantity)

    async def delete_order_items(self, order_id: int) -> int:
        return self._delete_where("order_items", lambda row: row.order_id == order_id)

    # --- bouquets ---
    async def list_bouquets(self) -> list[Bouquet]:
        return sorted(self._tables["bouquets"].values(), key=lambda b: (b.created_at, b.id), reverse=True)

    async def get_bouquet(self, bouquet_id: int) -> Optional[Bouquet]:
        return self._tables["bouquets"].get(bouquet_id)

    async def insert_bouquet(self, description: str, photo: Optional[str]) -> Bouquet:
        return self._insert("bouquets", description=description, photo=photo, created_at=datetime.now())

    async def update_bouquet(self, bouquet: Bouquet, **fields: Any) -> Bouquet:
        return self._update(bouquet, fields)

    async def delete_bouquet(self, bouquet_id: int) -> bool:
        self._delete_where("bouquet_items", lambda row: row.bouquet_id == bouquet_id)
        return self._tables["bouquets"].pop(bouquet_id, None) is not None

    async def list_bouquet_items(self, bouquet_id: int) -> list[BouquetItem]:
        return sorted(
            (i for i in self._tables["bouquet_items"].values() if i.bouquet_id == bouquet_id),
            key=lambda i: i.id,
        )

    async def insert_bouquet_item(self, bouquet_id: int, flower_name: str, quantity: int) -> BouquetItem:
        return self._insert("bouquet_items", bouquet_id=bouquet_id, flower_name=flower_name, quantity=quantity)

    # --- unit of work ---
    async def commit(self) -> None:
        self._committed = self._snapshot()

    async def rollback(self) -> None:
        self._tables = {
            name: {pk: _clone(row) for pk, row in rows.items()}
            for name, rows in self._committed.items()
        }
