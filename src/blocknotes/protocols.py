"""Protocols for dependency injection in blocknotes."""

from typing import Protocol, runtime_checkable

from blocknotes.models.note import Note, NotePage


@runtime_checkable
class NoteRepository(Protocol):
    """Persistence boundary for Note aggregates.

    Listings are ordered by most recently updated first and capped to
    ``MAX_PAGE_SIZE``. ``update`` is last-write-wins.
    """

    def create(self, note: Note) -> Note:
        """Store a new note."""
        ...

    def get_by_id(self, note_id: str) -> Note:
        """Return the note, raising NotFound if it does not exist."""
        ...

    def list_by_owner(self, owner_id: str, limit: int, offset: int) -> NotePage:
        """List notes owned by ``owner_id``."""
        ...

    def list_public(self, limit: int, offset: int) -> NotePage:
        """List notes visible to everyone."""
        ...

    def update(self, note: Note) -> Note:
        """Overwrite a stored note, raising NotFound if it does not exist."""
        ...

    def delete(self, note_id: str) -> None:
        """Delete a note, raising NotFound if it does not exist."""
        ...
