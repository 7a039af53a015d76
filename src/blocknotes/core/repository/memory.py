"""In-memory note repository."""

from collections.abc import Callable, Iterable

from loguru import logger

from blocknotes.core.repository.paging import clamp_page
from blocknotes.errors import NotFound, ValidationError
from blocknotes.models.note import Note, NotePage


class InMemoryNoteRepository:
    """Note store backed by a dict owned by the instance."""

    def __init__(self, notes: Iterable[Note] = ()) -> None:
        self._notes: dict[str, Note] = {note.id: note for note in notes}

    def __len__(self) -> int:
        return len(self._notes)

    def create(self, note: Note) -> Note:
        if note.id in self._notes:
            msg = f"Note {note.id!r} already exists"
            raise ValidationError(msg)
        self._notes[note.id] = note
        logger.debug("Created note {}", note.id)
        return note

    def get_by_id(self, note_id: str) -> Note:
        try:
            return self._notes[note_id]
        except KeyError:
            msg = f"Note {note_id!r} not found"
            raise NotFound(msg) from None

    def list_by_owner(self, owner_id: str, limit: int, offset: int) -> NotePage:
        return self._page(lambda n: n.owner_id == owner_id, limit, offset)

    def list_public(self, limit: int, offset: int) -> NotePage:
        return self._page(lambda n: n.is_public, limit, offset)

    def update(self, note: Note) -> Note:
        if note.id not in self._notes:
            msg = f"Note {note.id!r} not found"
            raise NotFound(msg)
        self._notes[note.id] = note
        return note

    def delete(self, note_id: str) -> None:
        if self._notes.pop(note_id, None) is None:
            msg = f"Note {note_id!r} not found"
            raise NotFound(msg)
        logger.debug("Deleted note {}", note_id)

    def _page(self, predicate: Callable[[Note], bool], limit: int, offset: int) -> NotePage:
        limit, offset = clamp_page(limit, offset)
        matching = sorted(
            (n for n in self._notes.values() if predicate(n)),
            key=lambda n: n.updated_at,
            reverse=True,
        )
        return NotePage(
            notes=tuple(matching[offset : offset + limit]),
            total=len(matching),
            limit=limit,
            offset=offset,
        )
