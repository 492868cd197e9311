"""
Warehouse ledger: named flower stocks and the debit/credit rules every other
service goes through.

Rules:
- stock never drops below zero, a debit larger than the stock clamps to 0;
- debiting a flower the warehouse does not know is a no-op;
- crediting an unknown flower creates its row.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

from flowerdesk.app.core.exceptions import ServiceError
from flowerdesk.app.core.logging import get_logger
from flowerdesk.app.models import FlowerStock
from flowerdesk.app.storage import Storage

logger = get_logger(__name__)


class LedgerError(ServiceError):
    """Base exception for warehouse errors."""


class FlowerNotFoundError(LedgerError):
    def __init__(self, flower_id: int):
        super().__init__(f"Flower {flower_id} not found", 404)


class InvalidQuantityError(LedgerError):
    def __init__(self, quantity, minimum: int = 1):
        super().__init__(f"Quantity must be an integer >= {minimum}, got {quantity!r}", 400)


class InvalidFlowerNameError(LedgerError):
    def __init__(self):
        super().__init__("Flower name must not be empty", 400)


class FlowerExistsError(LedgerError):
    def __init__(self, name: str):
        super().__init__(f"Flower '{name}' already exists", 400)


class LineItem(NamedTuple):
    """Flower name + quantity, as used by orders and bouquets."""
    flower: str
    quantity: int


@dataclass
class Shortage:
    flower: str
    needed: int
    available: int

    def to_dict(self) -> dict:
        return {"flower": self.flower, "needed": self.needed, "available": self.available}


def summarize_items(items: Iterable[Tuple[str, int]]) -> Dict[str, int]:
    """Collapse line items into ``{flower: total quantity}``, keeping first-seen order."""
    totals: Dict[str, int] = {}
    for flower, quantity in items:
        totals[flower] = totals.get(flower, 0) + quantity
    return totals


def check_quantity(quantity, minimum: int = 1) -> int:
    # bool is an int subclass, but True is not a quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < minimum:
        raise InvalidQuantityError(quantity, minimum)
    return quantity


def check_name(name: Optional[str]) -> str:
    if name is None or not name.strip():
        raise InvalidFlowerNameError()
    return name.strip()


def flower_to_dict(flower: FlowerStock) -> dict:
    return {
        "id": flower.id,
        "flower": flower.name,
        "amount": flower.quantity,
        "dateTime": flower.updated_at.isoformat() if flower.updated_at else None,
    }


class InventoryLedger:
    """Service class for warehouse operations. Never commits; the caller owns the transaction."""

    def __init__(self, storage: Storage):
        self.storage = storage

    async def list_flowers(self) -> List[FlowerStock]:
        return await self.storage.list_flowers()

    async def get(self, flower_id: int) -> FlowerStock:
        flower = await self.storage.get_flower(flower_id)
        if not flower:
            raise FlowerNotFoundError(flower_id)
        return flower

    async def get_by_name(self, name: str) -> Optional[FlowerStock]:
        return await self.storage.get_flower_by_name(name)

    async def add(self, name: str, quantity: int) -> FlowerStock:
        """Receive flowers: increment an existing row or create a new one."""
        name = check_name(name)
        check_quantity(quantity)
        flower = await self.storage.get_flower_by_name(name, for_update=True)
        if flower:
            before = flower.quantity
            flower = await self.storage.update_flower(flower, quantity=before + quantity)
            logger.info("Flowers received", flower=name, added=quantity, before=before, after=flower.quantity)
            return flower
        flower = await self.storage.insert_flower(name, quantity)
        logger.info("New flower in warehouse", flower=name, amount=quantity)
        return flower

    async def update(
        self,
        flower_id: int,
        *,
        name: Optional[str] = None,
        quantity: Optional[int] = None,
    ) -> FlowerStock:
        """Partial update: rename and/or set the amount (zero allowed)."""
        flower = await self.get(flower_id)
        fields = {}
        if name is not None:
            name = check_name(name)
            if name != flower.name:
                other = await self.storage.get_flower_by_name(name)
                if other and other.id != flower.id:
                    raise FlowerExistsError(name)
            fields["name"] = name
        if quantity is not None:
            fields["quantity"] = check_quantity(quantity, minimum=0)
        before = flower.quantity
        flower = await self.storage.update_flower(flower, **fields)
        logger.info("Flower updated", flower_id=flower_id, flower=flower.name, before=before, after=flower.quantity)
        return flower

    async def remove(self, flower_id: int) -> bool:
        deleted = await self.storage.delete_flower(flower_id)
        if deleted:
            logger.info("Flower removed from warehouse", flower_id=flower_id)
        return deleted

    async def debit(self, name: str, quantity: int) -> Optional[FlowerStock]:
        """Take ``quantity`` stems of ``name``; clamps at zero, ignores unknown flowers."""
        flower = await self.storage.get_flower_by_name(name, for_update=True)
        if not flower:
            logger.warning("Debit skipped: flower not in warehouse", flower=name, quantity=quantity)
            return None
        before = flower.quantity
        after = max(0, before - quantity)
        if before - quantity < 0:
            logger.warning("Debit clamped at zero", flower=name, requested=quantity, available=before)
        flower = await self.storage.update_flower(flower, quantity=after)
        logger.debug("Ledger debit", flower=name, quantity=quantity, before=before, after=after)
        return flower

    async def credit(self, name: str, quantity: int) -> FlowerStock:
        """Return ``quantity`` stems of ``name``; creates the row when missing."""
        flower = await self.storage.get_flower_by_name(name, for_update=True)
        if not flower:
            logger.info("Credit created flower", flower=name, amount=quantity)
            return await self.storage.insert_flower(name, quantity)
        before = flower.quantity
        flower = await self.storage.update_flower(flower, quantity=before + quantity)
        logger.debug("Ledger credit", flower=name, quantity=quantity, before=before, after=flower.quantity)
        return flower

    async def debit_all(self, demand: Dict[str, int]) -> None:
        """Debit several flowers, locking rows in name order."""
        for name in sorted(demand):
            await self.debit(name, demand[name])

    async def credit_all(self, returns: Dict[str, int]) -> None:
        for name in sorted(returns):
            await self.credit(name, returns[name])

    async def shortages(self, demand: Dict[str, int]) -> List[Shortage]:
        """Flowers whose stock (0 when unknown) is below the requested amount."""
        result = []
        for name, needed in demand.items():
            if needed <= 0:
                continue
            flower = await self.storage.get_flower_by_name(name)
            available = flower.quantity if flower else 0
            if available < needed:
                result.append(Shortage(flower=name, needed=needed, available=available))
        return result
