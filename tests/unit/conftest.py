"""Shared test fixtures."""

import sqlite3
from collections.abc import Iterator

import pytest

from blocknotes.core.database.schema import create_schema
from blocknotes.core.notes.service import NoteService
from blocknotes.models.block import Block, BlockMetadata, BlockType
from blocknotes.models.note import Note
from tests.unit.fakes import T0, FakeClock, RecordingNoteRepository

# p1
# l1 (bullet-list)
#     i1
#     i2
#         i2a
#     i3
# t1 (todo)
SAMPLE_TREE: tuple[Block, ...] = (
    Block(id="p1", type=BlockType.PARAGRAPH, content="Intro"),
    Block(
        id="l1",
        type=BlockType.BULLET_LIST,
        metadata=BlockMetadata(indent=0),
        children=(
            Block(id="i1", type=BlockType.LIST_ITEM, content="Milk", metadata=BlockMetadata(indent=1)),
            Block(
                id="i2",
                type=BlockType.LIST_ITEM,
                content="Eggs",
                metadata=BlockMetadata(indent=1),
                children=(
                    Block(
                        id="i2a",
                        type=BlockType.LIST_ITEM,
                        content="Free range",
                        metadata=BlockMetadata(indent=2),
                    ),
                ),
            ),
            Block(id="i3", type=BlockType.LIST_ITEM, content="Bread", metadata=BlockMetadata(indent=1)),
        ),
    ),
    Block(id="t1", type=BlockType.TODO, content="Call mom", metadata=BlockMetadata(checked=False)),
)


@pytest.fixture
def sample_tree() -> tuple[Block, ...]:
    return SAMPLE_TREE


@pytest.fixture
def sample_note() -> Note:
    """A note owned by u1 whose document is SAMPLE_TREE."""
    return Note(
        id="note1",
        title="Groceries",
        owner_id="u1",
        document=SAMPLE_TREE,
        created_at=T0,
        updated_at=T0,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository() -> RecordingNoteRepository:
    return RecordingNoteRepository()


@pytest.fixture
def service(repository: RecordingNoteRepository, clock: FakeClock) -> NoteService:
    return NoteService(repository, clock=clock)


@pytest.fixture
def sqlite_conn() -> Iterator[sqlite3.Connection]:
    """Return an in-memory DB with the notes schema."""
    conn = sqlite3.connect(":memory:")
    create_schema(conn)
    yield conn
    conn.close()
