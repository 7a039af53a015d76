"""Note aggregate: the only legal ways to change a note.

Every function takes a Note and returns a new one; the input is never
modified. Accepted changes re-stamp ``updated_at`` and keep ``id``,
``owner_id`` and ``created_at``. An operation aimed at a block that is no
longer in the document returns the note unchanged.
"""

from dataclasses import replace
from datetime import UTC, datetime

from loguru import logger

from blocknotes.config import MAX_TITLE_LENGTH
from blocknotes.core.blocks.classifier import classify
from blocknotes.core.ids import new_block_id, new_note_id
from blocknotes.core.tree.engine import (
    delete_by_id,
    depth_of,
    find_by_id,
    insert_after,
    set_indent,
    update_by_id,
)
from blocknotes.errors import InvalidOperation, ValidationError
from blocknotes.models.block import Block, BlockMetadata, BlockType, default_metadata
from blocknotes.models.note import Note


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


def default_paragraph() -> Block:
    """A fresh-id empty paragraph, the editor's starting cursor target."""
    return Block(id=new_block_id(), type=BlockType.PARAGRAPH)


def new_block(block_type: BlockType) -> Block:
    """A fresh-id empty block of ``block_type`` with default metadata."""
    return Block(id=new_block_id(), type=block_type, metadata=default_metadata(block_type))


def validate_title(title: str) -> str:
    """Return ``title`` if acceptable, else raise ValidationError."""
    if not title.strip():
        msg = "Title is required"
        raise ValidationError(msg)
    if len(title) > MAX_TITLE_LENGTH:
        msg = f"Title is too long ({len(title)} > {MAX_TITLE_LENGTH} characters)"
        raise ValidationError(msg)
    return title


def create_note(
    owner_id: str,
    title: str,
    *,
    note_id: str | None = None,
    now: datetime | None = None,
) -> Note:
    """Create a private note holding one empty paragraph."""
    if not owner_id:
        msg = "Owner is required"
        raise ValidationError(msg)
    stamp = now or utcnow()
    return Note(
        id=note_id or new_note_id(),
        title=validate_title(title),
        owner_id=owner_id,
        document=(default_paragraph(),),
        created_at=stamp,
        updated_at=stamp,
        is_public=False,
    )


def rename(note: Note, title: str, *, now: datetime | None = None) -> Note:
    return replace(note, title=validate_title(title), updated_at=now or utcnow())


def set_visibility(note: Note, is_public: bool, *, now: datetime | None = None) -> Note:
    return replace(note, is_public=is_public, updated_at=now or utcnow())


def edit_block(note: Note, block_id: str, content: str, *, now: datetime | None = None) -> Note:
    """Replace a block's content.

    Paragraph text that looks like a markdown heading (``"## Section"``)
    converts the block into a heading. Other block types keep their type.
    """
    target = find_by_id(note.document, block_id)
    if target is None:
        logger.debug("edit_block: block {} not in note {}", block_id, note.id)
        return note

    classification = classify(content) if target.type == BlockType.PARAGRAPH else None
    if classification is not None:
        document = update_by_id(
            note.document,
            block_id,
            content=classification.content,
            block_type=classification.type,
            metadata=classification.metadata,
        )
        logger.debug(
            "Converted block {} to {} level {}",
            block_id,
            classification.type,
            classification.metadata.level,
        )
    else:
        document = update_by_id(note.document, block_id, content=content)
    return replace(note, document=document, updated_at=now or utcnow())


def insert_block_after(
    note: Note,
    after_id: str | None,
    block_type: BlockType,
    *,
    block_id: str | None = None,
    now: datetime | None = None,
) -> Note:
    """Insert an empty block of ``block_type`` after ``after_id``.

    ``block_id`` lets the caller pick the new block's id up front; it must
    not already be used in the document. A list block starts with its
    ``indent`` set to the depth it lands at.
    """
    block = new_block(block_type)
    if block_id is not None:
        block = replace(block, id=block_id)
    if block.is_list:
        depth = depth_of(note.document, after_id) if after_id is not None else None
        block = replace(block, metadata=BlockMetadata(indent=depth or 0))
    document = insert_after(note.document, after_id, block)
    return replace(note, document=document, updated_at=now or utcnow())


def delete_block(note: Note, block_id: str, *, now: datetime | None = None) -> Note:
    """Remove a block and its subtree; an emptied document gets a fresh paragraph."""
    if find_by_id(note.document, block_id) is None:
        logger.debug("delete_block: block {} not in note {}", block_id, note.id)
        return note
    document = delete_by_id(note.document, block_id)
    if not document:
        document = (default_paragraph(),)
    return replace(note, document=document, updated_at=now or utcnow())


def toggle_todo(note: Note, block_id: str, *, now: datetime | None = None) -> Note:
    """Flip a todo block's ``checked`` flag.

    Raises:
        InvalidOperation: If the block is not a todo.
    """
    target = find_by_id(note.document, block_id)
    if target is None:
        logger.debug("toggle_todo: block {} not in note {}", block_id, note.id)
        return note
    if target.type != BlockType.TODO:
        msg = f"Block {block_id!r} is a {target.type}, not a todo"
        raise InvalidOperation(msg)
    document = update_by_id(
        note.document, block_id, metadata=BlockMetadata(checked=not target.checked)
    )
    return replace(note, document=document, updated_at=now or utcnow())


def indent_block(note: Note, block_id: str, delta: int, *, now: datetime | None = None) -> Note:
    """Nest a list block under its previous sibling (delta > 0) or lift it out (delta < 0).

    Raises:
        InvalidOperation: If the block is not a list block.
    """
    target = find_by_id(note.document, block_id)
    if target is None:
        logger.debug("indent_block: block {} not in note {}", block_id, note.id)
        return note
    if not target.is_list:
        msg = f"Block {block_id!r} is a {target.type}; only list blocks can be indented"
        raise InvalidOperation(msg)
    document = set_indent(note.document, block_id, delta)
    if document is note.document:
        return note
    return replace(note, document=document, updated_at=now or utcnow())
