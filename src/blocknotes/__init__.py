"""Notes made of nested, typed content blocks."""

from blocknotes.core.notes.service import NoteService
from blocknotes.core.repository.memory import InMemoryNoteRepository
from blocknotes.core.repository.sqlite import SqliteNoteRepository
from blocknotes.errors import (
    BlockNotesError,
    InvalidOperation,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from blocknotes.models.block import Block, BlockMetadata, BlockType
from blocknotes.models.note import Note
from blocknotes.protocols import NoteRepository

__all__ = [
    "Block",
    "BlockMetadata",
    "BlockNotesError",
    "BlockType",
    "InMemoryNoteRepository",
    "InvalidOperation",
    "Note",
    "NoteRepository",
    "NoteService",
    "NotFound",
    "PermissionDenied",
    "SqliteNoteRepository",
    "ValidationError",
]
