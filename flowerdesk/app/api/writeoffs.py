from fastapi import APIRouter, Depends

from flowerdesk.app.api.deps import get_storage, handle_service_error
from flowerdesk.app.core.exceptions import ServiceError
from flowerdesk.app.schemas import WriteoffCreate
from flowerdesk.app.services.writeoffs import WriteoffLog, writeoff_to_dict
from flowerdesk.app.storage import Storage

router = APIRouter()


@router.get("")
async def list_writeoffs(storage: Storage = Depends(get_storage)):
    writeoffs = await WriteoffLog(storage).list_writeoffs()
    return [writeoff_to_dict(w) for w in writeoffs]


@router.post("", status_code=201)
async def create_writeoff(data: WriteoffCreate, storage: Storage = Depends(get_storage)):
    try:
        writeoff = await WriteoffLog(storage).record(data.flower, data.amount)
        await storage.commit()
    except ServiceError as e:
        await storage.rollback()
        handle_service_error(e)
    return writeoff_to_dict(writeoff)


@router.delete("")
async def clear_writeoffs(storage: Storage = Depends(get_storage)):
    """Очистка истории списаний (склад не меняется)."""
    removed = await WriteoffLog(storage).clear()
    await storage.commit()
    return {"success": True, "removed": removed}
