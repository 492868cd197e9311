from fastapi import APIRouter, Depends

from flowerdesk.app.api.deps import get_storage, handle_service_error
from flowerdesk.app.schemas import NoteCreate, NoteUpdate
from flowerdesk.app.services.notes import NoteNotFoundError, NoteService, NoteServiceError, note_to_dict
from flowerdesk.app.storage import Storage

router = APIRouter()


@router.get("")
async def list_notes(storage: Storage = Depends(get_storage)):
    return [note_to_dict(n) for n in await NoteService(storage).list_notes()]


@router.get("/{note_id}")
async def get_note(note_id: int, storage: Storage = Depends(get_storage)):
    try:
        note = await NoteService(storage).get_note(note_id)
    except NoteServiceError as e:
        handle_service_error(e)
    return note_to_dict(note)


@router.post("", status_code=201)
async def create_note(data: NoteCreate, storage: Storage = Depends(get_storage)):
    try:
        note = await NoteService(storage).create_note(data.title, data.content)
        await storage.commit()
    except NoteServiceError as e:
        await storage.rollback()
        handle_service_error(e)
    return note_to_dict(note)


@router.put("/{note_id}")
async def update_note(note_id: int, data: NoteUpdate, storage: Storage = Depends(get_storage)):
    try:
        note = await NoteService(storage).update_note(note_id, title=data.title, content=data.content)
        await storage.commit()
    except NoteServiceError as e:
        await storage.rollback()
        handle_service_error(e)
    return note_to_dict(note)


@router.delete("/{note_id}")
async def delete_note(note_id: int, storage: Storage = Depends(get_storage)):
    try:
        if not await NoteService(storage).delete_note(note_id):
            raise NoteNotFoundError(note_id)
        await storage.commit()
    except NoteServiceError as e:
        await storage.rollback()
        handle_service_error(e)
    return {"success": True}
