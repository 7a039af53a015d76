"""Note use cases: load, authorize, mutate, persist."""

from collections.abc import Callable
from datetime import datetime

from loguru import logger

from blocknotes.config import DEFAULT_PAGE_SIZE
from blocknotes.core.ids import new_block_id
from blocknotes.core.notes import aggregate
from blocknotes.core.notes.access import require_read, require_write
from blocknotes.models.block import BlockType
from blocknotes.models.note import Note, NotePage
from blocknotes.protocols import NoteRepository


class NoteService:
    """Run aggregate operations on behalf of an acting user.

    Every mutation is checked against the note's owner before it is applied.
    Concurrent writers to the same note resolve by last write wins.
    """

    def __init__(
        self,
        repository: NoteRepository,
        *,
        clock: Callable[[], datetime] = aggregate.utcnow,
    ) -> None:
        self.repository = repository
        self.clock = clock

    def create_note(self, acting_user: str, title: str) -> Note:
        note = aggregate.create_note(acting_user, title, now=self.clock())
        self.repository.create(note)
        logger.info("User {} created note {}", acting_user, note.id)
        return note

    def get_note(self, acting_user: str, note_id: str) -> Note:
        note = self.repository.get_by_id(note_id)
        require_read(acting_user, note)
        return note

    def list_notes(
        self, acting_user: str, *, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
    ) -> NotePage:
        return self.repository.list_by_owner(acting_user, limit, offset)

    def list_public_notes(self, *, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> NotePage:
        return self.repository.list_public(limit, offset)

    def rename(self, acting_user: str, note_id: str, title: str) -> Note:
        return self._mutate(acting_user, note_id, lambda n: aggregate.rename(n, title, now=self.clock()))

    def set_visibility(self, acting_user: str, note_id: str, is_public: bool) -> Note:
        return self._mutate(
            acting_user,
            note_id,
            lambda n: aggregate.set_visibility(n, is_public, now=self.clock()),
        )

    def edit_block(self, acting_user: str, note_id: str, block_id: str, content: str) -> Note:
        return self._mutate(
            acting_user,
            note_id,
            lambda n: aggregate.edit_block(n, block_id, content, now=self.clock()),
        )

    def insert_block_after(
        self,
        acting_user: str,
        note_id: str,
        after_id: str | None,
        block_type: BlockType,
    ) -> tuple[Note, str]:
        """Insert an empty block; returns the note and the new block's id."""
        block_id = new_block_id()
        note = self._mutate(
            acting_user,
            note_id,
            lambda n: aggregate.insert_block_after(
                n, after_id, block_type, block_id=block_id, now=self.clock()
            ),
        )
        return note, block_id

    def delete_block(self, acting_user: str, note_id: str, block_id: str) -> Note:
        return self._mutate(
            acting_user,
            note_id,
            lambda n: aggregate.delete_block(n, block_id, now=self.clock()),
        )

    def toggle_todo(self, acting_user: str, note_id: str, block_id: str) -> Note:
        return self._mutate(
            acting_user,
            note_id,
            lambda n: aggregate.toggle_todo(n, block_id, now=self.clock()),
        )

    def indent_block(self, acting_user: str, note_id: str, block_id: str, delta: int) -> Note:
        return self._mutate(
            acting_user,
            note_id,
            lambda n: aggregate.indent_block(n, block_id, delta, now=self.clock()),
        )

    def delete_note(self, acting_user: str, note_id: str) -> None:
        note = self.repository.get_by_id(note_id)
        require_write(acting_user, note)
        self.repository.delete(note_id)
        logger.info("User {} deleted note {}", acting_user, note_id)

    def _mutate(self, acting_user: str, note_id: str, change: Callable[[Note], Note]) -> Note:
        note = self.repository.get_by_id(note_id)
        require_write(acting_user, note)
        updated = change(note)
        if updated is note:
            return note
        self.repository.update(updated)
        logger.debug("Saved note {} at {}", note_id, updated.updated_at.isoformat())
        return updated
