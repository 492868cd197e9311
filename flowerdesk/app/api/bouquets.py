from fastapi import APIRouter, Depends

from flowerdesk.app.api.deps import get_storage, handle_service_error
from flowerdesk.app.core.exceptions import ServiceError
from flowerdesk.app.core.logging import get_logger
from flowerdesk.app.core.settings import get_settings
from flowerdesk.app.schemas import BouquetCreate, BouquetUpdate
from flowerdesk.app.services.bouquets import (
    BouquetService,
    BouquetServiceError,
    bouquet_item_to_dict,
    bouquet_to_dict,
)
from flowerdesk.app.storage import Storage

router = APIRouter()
logger = get_logger(__name__)


def _service(storage: Storage) -> BouquetService:
    settings = get_settings()
    return BouquetService(
        storage,
        strict_stock=settings.STRICT_STOCK_CHECK,
        photo_max_side_px=settings.PHOTO_MAX_SIDE_PX,
        photo_quality=settings.PHOTO_QUALITY,
    )


@router.get("")
async def list_bouquets(storage: Storage = Depends(get_storage)):
    return [bouquet_to_dict(b) for b in await _service(storage).list_bouquets()]


@router.get("/{bouquet_id}")
async def get_bouquet(bouquet_id: int, storage: Storage = Depends(get_storage)):
    try:
        bouquet = await _service(storage).get_bouquet(bouquet_id)
    except BouquetServiceError as e:
        handle_service_error(e)
    return bouquet_to_dict(bouquet)


@router.get("/{bouquet_id}/items")
async def get_bouquet_items(bouquet_id: int, storage: Storage = Depends(get_storage)):
    try:
        items = await _service(storage).get_items(bouquet_id)
    except BouquetServiceError as e:
        handle_service_error(e)
    return [bouquet_item_to_dict(i) for i in items]


@router.post("", status_code=201)
async def create_bouquet(data: BouquetCreate, storage: Storage = Depends(get_storage)):
    """Сборка букета: цветы списываются со склада."""
    try:
        bouquet = await _service(storage).create_bouquet(
            data.bouquet.description,
            data.bouquet.photo,
            [(i.flower, i.amount) for i in data.items],
        )
        await storage.commit()
    except ServiceError as e:
        await storage.rollback()
        logger.warning("Bouquet creation failed", error=e.message, error_code=e.status_code)
        handle_service_error(e)
    return bouquet_to_dict(bouquet)


@router.put("/{bouquet_id}")
async def update_bouquet(bouquet_id: int, data: BouquetUpdate, storage: Storage = Depends(get_storage)):
    try:
        bouquet = await _service(storage).update_bouquet(bouquet_id, data.description, data.photo)
        await storage.commit()
    except BouquetServiceError as e:
        await storage.rollback()
        handle_service_error(e)
    return bouquet_to_dict(bouquet)


@router.post("/{bouquet_id}/sell")
async def sell_bouquet(bouquet_id: int, storage: Storage = Depends(get_storage)):
    try:
        await _service(storage).sell(bouquet_id)
        await storage.commit()
    except BouquetServiceError as e:
        await storage.rollback()
        handle_service_error(e)
    return {"success": True}


@router.post("/{bouquet_id}/disassemble")
async def disassemble_bouquet(bouquet_id: int, storage: Storage = Depends(get_storage)):
    """Разборка: цветы возвращаются на склад."""
    try:
        await _service(storage).disassemble(bouquet_id)
        await storage.commit()
    except BouquetServiceError as e:
        await storage.rollback()
        handle_service_error(e)
    return {"success": True}
