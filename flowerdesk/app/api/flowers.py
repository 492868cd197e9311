from fastapi import APIRouter, Depends

from flowerdesk.app.api.deps import get_storage, handle_service_error
from flowerdesk.app.core.logging import get_logger
from flowerdesk.app.schemas import FlowerCreate, FlowerUpdate
from flowerdesk.app.services.ledger import FlowerNotFoundError, InventoryLedger, LedgerError, flower_to_dict
from flowerdesk.app.storage import Storage

router = APIRouter()
logger = get_logger(__name__)


@router.get("")
async def list_flowers(storage: Storage = Depends(get_storage)):
    flowers = await InventoryLedger(storage).list_flowers()
    return [flower_to_dict(f) for f in flowers]


@router.get("/{flower_id}")
async def get_flower(flower_id: int, storage: Storage = Depends(get_storage)):
    try:
        flower = await InventoryLedger(storage).get(flower_id)
    except LedgerError as e:
        handle_service_error(e)
    return flower_to_dict(flower)


@router.post("", status_code=201)
async def add_flowers(data: FlowerCreate, storage: Storage = Depends(get_storage)):
    """Приемка: увеличивает остаток или заводит новый цветок."""
    try:
        flower = await InventoryLedger(storage).add(data.flower, data.amount)
        await storage.commit()
    except LedgerError as e:
        await storage.rollback()
        handle_service_error(e)
    return flower_to_dict(flower)


@router.put("/{flower_id}")
async def update_flower(flower_id: int, data: FlowerUpdate, storage: Storage = Depends(get_storage)):
    try:
        flower = await InventoryLedger(storage).update(flower_id, name=data.flower, quantity=data.amount)
        await storage.commit()
    except LedgerError as e:
        await storage.rollback()
        logger.warning("Flower update failed", flower_id=flower_id, error=e.message)
        handle_service_error(e)
    return flower_to_dict(flower)


@router.delete("/{flower_id}")
async def delete_flower(flower_id: int, storage: Storage = Depends(get_storage)):
    try:
        if not await InventoryLedger(storage).remove(flower_id):
            raise FlowerNotFoundError(flower_id)
        await storage.commit()
    except LedgerError as e:
        await storage.rollback()
        handle_service_error(e)
    return {"success": True}
