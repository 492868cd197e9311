from typing import List, Optional

from flowerdesk.app.core.exceptions import ServiceError
from flowerdesk.app.models import Note
from flowerdesk.app.storage import Storage


class NoteServiceError(ServiceError):
    """Base exception for note errors."""


class NoteNotFoundError(NoteServiceError):
    def __init__(self, note_id: int):
        super().__init__(f"Note {note_id} not found", 404)


class InvalidNoteError(NoteServiceError):
    def __init__(self, field: str):
        super().__init__(f"Note {field} must not be empty", 400)


def note_to_dict(note: Note) -> dict:
    return {
        "id": note.id,
        "title": note.title,
        "content": note.content,
        "dateTime": note.updated_at.isoformat() if note.updated_at else None,
    }


def _require(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise InvalidNoteError(field)
    return value


class NoteService:

    def __init__(self, storage: Storage):
        self.storage = storage

    async def list_notes(self) -> List[Note]:
        return await self.storage.list_notes()

    async def get_note(self, note_id: int) -> Note:
        note = await self.storage.get_note(note_id)
        if not note:
            raise NoteNotFoundError(note_id)
        return note

    async def create_note(self, title: str, content: str) -> Note:
        return await self.storage.insert_note(_require(title, "title"), _require(content, "content"))

    async def update_note(
        self,
        note_id: int,
        *,
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Note:
        note = await self.get_note(note_id)
        fields = {}
        if title is not None:
            fields["title"] = _require(title, "title")
        if content is not None:
            fields["content"] = _require(content, "content")
        return await self.storage.update_note(note, **fields)

    async def delete_note(self, note_id: int) -> bool:
        return await self.storage.delete_note(note_id)
