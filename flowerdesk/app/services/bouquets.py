"""Showcase bouquets: assembled from warehouse stock, later sold or taken apart."""
from typing import Any, Dict, Iterable, List, Optional, Sequence

from flowerdesk.app.core.exceptions import InsufficientStockError, ServiceError
from flowerdesk.app.core.image_convert import DEFAULT_MAX_SIDE_PX, DEFAULT_QUALITY, normalize_photo
from flowerdesk.app.core.logging import get_logger
from flowerdesk.app.core.metrics import bouquet_actions_total
from flowerdesk.app.models import Bouquet, BouquetItem
from flowerdesk.app.services.ledger import (
    InventoryLedger,
    LineItem,
    check_name,
    check_quantity,
    summarize_items,
)
from flowerdesk.app.storage import Storage

logger = get_logger(__name__)


class BouquetServiceError(ServiceError):
    """Base exception for bouquet errors."""


class BouquetNotFoundError(BouquetServiceError):
    def __init__(self, bouquet_id: int):
        super().__init__(f"Bouquet {bouquet_id} not found", 404)


class EmptyBouquetError(BouquetServiceError):
    def __init__(self):
        super().__init__("Bouquet needs at least one flower", 400)


class InvalidPhotoError(BouquetServiceError):
    def __init__(self, reason: str):
        super().__init__(reason, 400)


def bouquet_to_dict(bouquet: Bouquet) -> Dict[str, Any]:
    return {
        "id": bouquet.id,
        "description": bouquet.description,
        "dateTime": bouquet.created_at.isoformat() if bouquet.created_at else None,
        "photo": bouquet.photo,
    }


def bouquet_item_to_dict(item: BouquetItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "bouquetId": item.bouquet_id,
        "flower": item.flower_name,
        "amount": item.quantity,
    }


def describe_items(lines: Iterable[LineItem]) -> str:
    """Default description: ``"Роза ×3, Лилия ×2"``."""
    return ", ".join(f"{name} ×{qty}" for name, qty in summarize_items(lines).items())


class BouquetService:

    def __init__(
        self,
        storage: Storage,
        strict_stock: bool = False,
        photo_max_side_px: int = DEFAULT_MAX_SIDE_PX,
        photo_quality: int = DEFAULT_QUALITY,
    ):
        self.storage = storage
        self.ledger = InventoryLedger(storage)
        self.strict_stock = strict_stock
        self.photo_max_side_px = photo_max_side_px
        self.photo_quality = photo_quality

    async def list_bouquets(self) -> List[Bouquet]:
        return await self.storage.list_bouquets()

    async def get_bouquet(self, bouquet_id: int) -> Bouquet:
        bouquet = await self.storage.get_bouquet(bouquet_id)
        if not bouquet:
            raise BouquetNotFoundError(bouquet_id)
        return bouquet

    async def get_items(self, bouquet_id: int) -> List[BouquetItem]:
        await self.get_bouquet(bouquet_id)
        return await self.storage.list_bouquet_items(bouquet_id)

    def _photo(self, photo: Optional[str]) -> Optional[str]:
        if not photo:
            return None
        try:
            return normalize_photo(photo, self.photo_max_side_px, self.photo_quality)
        except ValueError as e:
            raise InvalidPhotoError(str(e))

    async def create_bouquet(
        self,
        description: Optional[str],
        photo: Optional[str],
        items: Iterable[Sequence],
    ) -> Bouquet:
        """
        Assemble a bouquet: every line is debited from the warehouse.

        Raises:
            EmptyBouquetError: no items
            InvalidPhotoError: photo is not a decodable image
            InsufficientStockError: strict stock mode and the warehouse is short
        """
        lines = [LineItem(check_name(flower), check_quantity(qty)) for flower, qty in items]
        if not lines:
            raise EmptyBouquetError()
        if not description or not description.strip():
            description = describe_items(lines)
        stored_photo = self._photo(photo)

        if self.strict_stock:
            shortages = await self.ledger.shortages(summarize_items(lines))
            if shortages:
                raise InsufficientStockError(shortages)

        bouquet = await self.storage.insert_bouquet(description.strip(), stored_photo)
        for line in lines:
            await self.storage.insert_bouquet_item(bouquet.id, line.flower, line.quantity)
        await self.ledger.debit_all(summarize_items(lines))

        bouquet_actions_total.labels(action="create").inc()
        logger.info("Bouquet assembled", bouquet_id=bouquet.id, lines=len(lines), has_photo=stored_photo is not None)
        return bouquet

    async def update_bouquet(
        self,
        bouquet_id: int,
        description: Optional[str] = None,
        photo: Optional[str] = None,
    ) -> Bouquet:
        """Edit description/photo only; composition and stock stay as they are."""
        bouquet = await self.get_bouquet(bouquet_id)
        fields = {}
        if description is not None and description.strip():
            fields["description"] = description.strip()
        if photo is not None:
            # Empty string removes the photo
            fields["photo"] = self._photo(photo)
        if fields:
            bouquet = await self.storage.update_bouquet(bouquet, **fields)
        return bouquet

    async def sell(self, bouquet_id: int) -> None:
        """The flowers leave with the customer; warehouse is not touched."""
        await self.get_bouquet(bouquet_id)
        await self.storage.delete_bouquet(bouquet_id)
        bouquet_actions_total.labels(action="sell").inc()
        logger.info("Bouquet sold", bouquet_id=bouquet_id)

    async def disassemble(self, bouquet_id: int) -> None:
        """Return every stem to the warehouse, then drop the bouquet."""
        items = await self.get_items(bouquet_id)
        await self.ledger.credit_all(summarize_items((i.flower_name, i.quantity) for i in items))
        await self.storage.delete_bouquet(bouquet_id)
        bouquet_actions_total.labels(action="disassemble").inc()
        logger.info("Bouquet disassembled", bouquet_id=bouquet_id, lines=len(items))
