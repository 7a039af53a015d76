"""Tests for the note aggregate operations."""

from datetime import timedelta

import pytest

from blocknotes.core.notes import aggregate
from blocknotes.core.tree.engine import find_by_id
from blocknotes.errors import InvalidOperation, ValidationError
from blocknotes.models.block import Block, BlockMetadata, BlockType
from blocknotes.models.note import Note
from tests.unit.fakes import T0

LATER = T0 + timedelta(minutes=5)


def test_create_note_starts_with_one_empty_paragraph() -> None:
    note = aggregate.create_note("u1", "Groceries", now=T0)

    assert note.title == "Groceries"
    assert note.owner_id == "u1"
    assert note.is_public is False
    assert note.created_at == note.updated_at == T0
    assert len(note.document) == 1
    block = note.document[0]
    assert block.type == BlockType.PARAGRAPH
    assert block.content == ""
    assert block.children == ()


def test_create_note_assigns_unique_ids() -> None:
    first = aggregate.create_note("u1", "A")
    second = aggregate.create_note("u1", "B")
    assert first.id != second.id
    assert first.document[0].id != second.document[0].id


@pytest.mark.parametrize("title", ["", "   ", "x" * 256])
def test_create_note_rejects_bad_titles(title: str) -> None:
    with pytest.raises(ValidationError):
        aggregate.create_note("u1", title)


def test_create_note_requires_owner() -> None:
    with pytest.raises(ValidationError):
        aggregate.create_note("", "Title")


def test_rename_replaces_title_and_bumps_updated_at(sample_note: Note) -> None:
    renamed = aggregate.rename(sample_note, "Shopping", now=LATER)
    assert renamed.title == "Shopping"
    assert renamed.updated_at == LATER
    assert (renamed.id, renamed.owner_id, renamed.created_at) == (
        sample_note.id,
        sample_note.owner_id,
        sample_note.created_at,
    )
    assert renamed.document is sample_note.document


def test_rename_accepts_max_length_title(sample_note: Note) -> None:
    assert aggregate.rename(sample_note, "x" * 255).title == "x" * 255


@pytest.mark.parametrize("title", ["", "x" * 256])
def test_rename_rejects_bad_titles(sample_note: Note, title: str) -> None:
    with pytest.raises(ValidationError):
        aggregate.rename(sample_note, title)


def test_edit_block_converts_markdown_heading(sample_note: Note) -> None:
    edited = aggregate.edit_block(sample_note, "p1", "## Section", now=LATER)

    block = find_by_id(edited.document, "p1")
    assert block == Block(
        id="p1", type=BlockType.HEADING, content="Section", metadata=BlockMetadata(level=2)
    )
    assert edited.updated_at == LATER
    assert edited.title == sample_note.title


def test_edit_block_plain_text_keeps_paragraph(sample_note: Note) -> None:
    edited = aggregate.edit_block(sample_note, "p1", "Just words", now=LATER)
    block = find_by_id(edited.document, "p1")
    assert block is not None
    assert block.type == BlockType.PARAGRAPH
    assert block.content == "Just words"


def test_edit_block_does_not_classify_non_paragraphs(sample_note: Note) -> None:
    edited = aggregate.edit_block(sample_note, "i1", "# Not a heading")
    block = find_by_id(edited.document, "i1")
    assert block is not None
    assert block.type == BlockType.LIST_ITEM
    assert block.content == "# Not a heading"


def test_edit_heading_does_not_demote(sample_note: Note) -> None:
    heading = aggregate.edit_block(sample_note, "p1", "# Title")
    edited = aggregate.edit_block(heading, "p1", "plain again")
    block = find_by_id(edited.document, "p1")
    assert block is not None
    assert block.type == BlockType.HEADING
    assert block.content == "plain again"
    assert block.level == 1


def test_edit_missing_block_returns_note_unchanged(sample_note: Note) -> None:
    assert aggregate.edit_block(sample_note, "gone", "text", now=LATER) is sample_note


def test_insert_block_after_uses_default_metadata(sample_note: Note) -> None:
    updated = aggregate.insert_block_after(
        sample_note, "p1", BlockType.TODO, block_id="t2", now=LATER
    )
    assert [b.id for b in updated.document] == ["p1", "t2", "l1", "t1"]
    assert updated.document[1] == Block(
        id="t2", type=BlockType.TODO, content="", metadata=BlockMetadata(checked=False)
    )
    assert updated.updated_at == LATER


def test_insert_block_after_generates_id(sample_note: Note) -> None:
    updated = aggregate.insert_block_after(sample_note, None, BlockType.HEADING)
    new = updated.document[-1]
    assert new.type == BlockType.HEADING
    assert new.level == 1
    assert new.id not in {"p1", "l1", "t1"}


def test_delete_block_removes_block(sample_note: Note) -> None:
    updated = aggregate.delete_block(sample_note, "l1", now=LATER)
    assert [b.id for b in updated.document] == ["p1", "t1"]
    assert updated.updated_at == LATER


def test_delete_last_block_reinserts_empty_paragraph() -> None:
    note = aggregate.create_note("u1", "Solo", now=T0)
    only_id = note.document[0].id

    updated = aggregate.delete_block(note, only_id, now=LATER)

    assert len(updated.document) == 1
    block = updated.document[0]
    assert block.type == BlockType.PARAGRAPH
    assert block.content == ""
    assert block.id != only_id


def test_delete_missing_block_returns_note_unchanged(sample_note: Note) -> None:
    assert aggregate.delete_block(sample_note, "gone") is sample_note


def test_set_visibility_bumps_updated_at(sample_note: Note) -> None:
    public = aggregate.set_visibility(sample_note, True, now=LATER)
    assert public.is_public is True
    assert public.updated_at == LATER
    assert aggregate.set_visibility(public, False).is_public is False


def test_toggle_todo_flips_checked_and_keeps_content(sample_note: Note) -> None:
    toggled = aggregate.toggle_todo(sample_note, "t1", now=LATER)
    block = find_by_id(toggled.document, "t1")
    assert block is not None
    assert block.checked is True
    assert block.content == "Call mom"
    assert toggled.updated_at == LATER

    again = aggregate.toggle_todo(toggled, "t1")
    block = find_by_id(again.document, "t1")
    assert block is not None
    assert block.checked is False


def test_toggle_todo_without_metadata_starts_unchecked() -> None:
    note = aggregate.create_note("u1", "T", now=T0)
    note = Note(
        id=note.id,
        title=note.title,
        owner_id=note.owner_id,
        document=(Block(id="bare", type=BlockType.TODO, content="x"),),
        created_at=T0,
        updated_at=T0,
    )
    toggled = aggregate.toggle_todo(note, "bare")
    assert toggled.document[0].checked is True


def test_toggle_non_todo_fails(sample_note: Note) -> None:
    with pytest.raises(InvalidOperation):
        aggregate.toggle_todo(sample_note, "p1")


def test_toggle_missing_block_returns_note_unchanged(sample_note: Note) -> None:
    assert aggregate.toggle_todo(sample_note, "gone") is sample_note


def test_indent_block_nests_list_item(sample_note: Note) -> None:
    updated = aggregate.indent_block(sample_note, "i3", 1, now=LATER)
    i2 = find_by_id(updated.document, "i2")
    assert i2 is not None
    assert [c.id for c in i2.children] == ["i2a", "i3"]
    assert updated.updated_at == LATER


def test_indent_block_rejects_non_list_blocks(sample_note: Note) -> None:
    with pytest.raises(InvalidOperation):
        aggregate.indent_block(sample_note, "t1", 1)


def test_indent_block_that_cannot_move_is_unchanged(sample_note: Note) -> None:
    assert aggregate.indent_block(sample_note, "i1", 1) is sample_note


def test_groceries_scenario() -> None:
    note = aggregate.create_note("u1", "Groceries", now=T0)
    assert len(note.document) == 1
    first_id = note.document[0].id

    note = aggregate.insert_block_after(note, first_id, BlockType.TODO, now=T0 + timedelta(seconds=1))
    assert len(note.document) == 2
    todo = note.document[1]
    assert todo.type == BlockType.TODO
    assert todo.checked is False
    assert todo.content == ""

    before = note.updated_at
    note = aggregate.toggle_todo(note, todo.id, now=T0 + timedelta(seconds=2))
    assert note.document[1].checked is True
    assert note.updated_at > before
    assert note.created_at == T0


def test_insert_list_item_takes_depth_of_sibling(sample_note: Note) -> None:
    updated = aggregate.insert_block_after(sample_note, "i1", BlockType.LIST_ITEM, block_id="i1b")
    block = find_by_id(updated.document, "i1b")
    assert block is not None
    assert block.metadata == BlockMetadata(indent=1)

    deeper = aggregate.insert_block_after(sample_note, "i2a", BlockType.LIST_ITEM, block_id="x")
    assert find_by_id(deeper.document, "x").indent == 2


def test_insert_list_block_at_top_level_has_zero_indent(sample_note: Note) -> None:
    updated = aggregate.insert_block_after(sample_note, "stale", BlockType.BULLET_LIST, block_id="l2")
    assert updated.document[-1].metadata == BlockMetadata(indent=0)
