"""Write-offs: wilted or broken flowers leaving the warehouse."""
from typing import List

from flowerdesk.app.core.logging import get_logger
from flowerdesk.app.core.metrics import writeoff_units_total
from flowerdesk.app.models import WriteOff
from flowerdesk.app.services.ledger import InventoryLedger, check_name, check_quantity
from flowerdesk.app.storage import Storage

logger = get_logger(__name__)


def writeoff_to_dict(writeoff: WriteOff) -> dict:
    return {
        "id": writeoff.id,
        "flower": writeoff.flower_name,
        "amount": writeoff.quantity,
        "dateTime": writeoff.created_at.isoformat() if writeoff.created_at else None,
    }


class WriteoffLog:

    def __init__(self, storage: Storage):
        self.storage = storage
        self.ledger = InventoryLedger(storage)

    async def list_writeoffs(self) -> List[WriteOff]:
        return await self.storage.list_writeoffs()

    async def record(self, flower: str, quantity: int) -> WriteOff:
        """Append a write-off and take the same amount from the warehouse.

        A flower missing from the warehouse is still recorded; the debit is skipped.
        """
        flower = check_name(flower)
        check_quantity(quantity)
        writeoff = await self.storage.insert_writeoff(flower, quantity)
        await self.ledger.debit(flower, quantity)
        writeoff_units_total.inc(quantity)
        logger.info("Write-off recorded", flower=flower, amount=quantity, writeoff_id=writeoff.id)
        return writeoff

    async def clear(self) -> int:
        """Drop the whole history. Stock is not touched."""
        removed = await self.storage.delete_all_writeoffs()
        logger.info("Write-off history cleared", removed=removed)
        return removed
