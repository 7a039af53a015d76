"""Contract tests shared by the in-memory and SQLite note repositories."""

import sqlite3
from dataclasses import replace
from datetime import timedelta

import pytest

from blocknotes.config import MAX_PAGE_SIZE
from blocknotes.core.repository.memory import InMemoryNoteRepository
from blocknotes.core.repository.sqlite import SqliteNoteRepository
from blocknotes.errors import NotFound, ValidationError
from blocknotes.models.note import Note
from blocknotes.protocols import NoteRepository
from tests.unit.fakes import T0


@pytest.fixture(params=["memory", "sqlite"])
def repo(request: pytest.FixtureRequest, sqlite_conn: sqlite3.Connection) -> NoteRepository:
    if request.param == "memory":
        return InMemoryNoteRepository()
    return SqliteNoteRepository(sqlite_conn)


def _note(note_id: str, owner: str, *, minutes: int = 0, public: bool = False) -> Note:
    stamp = T0 + timedelta(minutes=minutes)
    return Note(
        id=note_id,
        title=f"Note {note_id}",
        owner_id=owner,
        document=(),
        created_at=T0,
        updated_at=stamp,
        is_public=public,
    )


def test_implements_protocol(repo: NoteRepository) -> None:
    assert isinstance(repo, NoteRepository)


def test_create_then_get_returns_equal_note(repo: NoteRepository, sample_note: Note) -> None:
    repo.create(sample_note)
    assert repo.get_by_id(sample_note.id) == sample_note


def test_create_duplicate_id_fails(repo: NoteRepository, sample_note: Note) -> None:
    repo.create(sample_note)
    with pytest.raises(ValidationError):
        repo.create(sample_note)


def test_get_missing_raises_not_found(repo: NoteRepository) -> None:
    with pytest.raises(NotFound):
        repo.get_by_id("missing")


def test_update_overwrites_stored_note(repo: NoteRepository, sample_note: Note) -> None:
    repo.create(sample_note)
    renamed = replace(sample_note, title="Renamed", updated_at=T0 + timedelta(hours=1))
    repo.update(renamed)
    assert repo.get_by_id(sample_note.id).title == "Renamed"


def test_update_is_last_write_wins(repo: NoteRepository, sample_note: Note) -> None:
    repo.create(sample_note)
    newer = replace(sample_note, title="Newer", updated_at=T0 + timedelta(hours=2))
    stale = replace(sample_note, title="Stale", updated_at=T0 + timedelta(hours=1))
    repo.update(newer)
    repo.update(stale)
    assert repo.get_by_id(sample_note.id).title == "Stale"


def test_update_missing_raises_not_found(repo: NoteRepository, sample_note: Note) -> None:
    with pytest.raises(NotFound):
        repo.update(sample_note)


def test_delete_removes_note(repo: NoteRepository, sample_note: Note) -> None:
    repo.create(sample_note)
    repo.delete(sample_note.id)
    with pytest.raises(NotFound):
        repo.get_by_id(sample_note.id)
    with pytest.raises(NotFound):
        repo.delete(sample_note.id)


def test_list_by_owner_is_most_recent_first(repo: NoteRepository) -> None:
    repo.create(_note("a", "u1", minutes=1))
    repo.create(_note("b", "u1", minutes=3))
    repo.create(_note("c", "u1", minutes=2))
    repo.create(_note("z", "u2", minutes=9))

    page = repo.list_by_owner("u1", limit=10, offset=0)

    assert [n.id for n in page.notes] == ["b", "c", "a"]
    assert page.total == 3
    assert not page.has_more


def test_list_by_owner_paginates(repo: NoteRepository) -> None:
    for i in range(5):
        repo.create(_note(f"n{i}", "u1", minutes=i))

    page = repo.list_by_owner("u1", limit=2, offset=2)

    assert [n.id for n in page.notes] == ["n2", "n1"]
    assert page.total == 5
    assert page.has_more


def test_list_public_only_returns_public_notes(repo: NoteRepository) -> None:
    repo.create(_note("a", "u1", minutes=1, public=True))
    repo.create(_note("b", "u2", minutes=2))
    repo.create(_note("c", "u2", minutes=3, public=True))

    page = repo.list_public(limit=10, offset=0)

    assert [n.id for n in page.notes] == ["c", "a"]


def test_list_limit_is_capped(repo: NoteRepository) -> None:
    for i in range(MAX_PAGE_SIZE + 5):
        repo.create(_note(f"n{i:03d}", "u1", minutes=i))

    page = repo.list_by_owner("u1", limit=1000, offset=-3)

    assert len(page.notes) == MAX_PAGE_SIZE
    assert page.limit == MAX_PAGE_SIZE
    assert page.offset == 0
    assert page.total == MAX_PAGE_SIZE + 5
