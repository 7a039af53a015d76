"""Convert notes and blocks to and from their JSON wire representation.

Notes serialize to ``id, title, document, isPublic, createdAt, updatedAt,
userId``; blocks to ``id, type, content, metadata?, children?``. Absent
metadata and children are omitted rather than emitted as null.
"""

from datetime import UTC, datetime
from typing import Any

from blocknotes.core.notes.aggregate import validate_title
from blocknotes.errors import ValidationError
from blocknotes.models.block import (
    MAX_HEADING_LEVEL,
    MIN_HEADING_LEVEL,
    Block,
    BlockMetadata,
    BlockType,
)
from blocknotes.models.note import Note


def block_to_wire(block: Block) -> dict[str, Any]:
    data: dict[str, Any] = {"id": block.id, "type": str(block.type), "content": block.content}
    if block.metadata is not None and not block.metadata.is_empty():
        data["metadata"] = metadata_to_wire(block.metadata)
    if block.children:
        data["children"] = [block_to_wire(child) for child in block.children]
    return data


def metadata_to_wire(metadata: BlockMetadata) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if metadata.level is not None:
        data["level"] = metadata.level
    if metadata.checked is not None:
        data["checked"] = metadata.checked
    if metadata.indent is not None:
        data["indent"] = metadata.indent
    return data


def note_to_wire(note: Note) -> dict[str, Any]:
    return {
        "id": note.id,
        "title": note.title,
        "document": [block_to_wire(b) for b in note.document],
        "isPublic": note.is_public,
        "createdAt": note.created_at.isoformat(),
        "updatedAt": note.updated_at.isoformat(),
        "userId": note.owner_id,
    }


def block_from_wire(data: Any) -> Block:
    """Parse a wire block, validating types and metadata ranges.

    Raises:
        ValidationError: On missing fields, unknown types or bad metadata.
    """
    if not isinstance(data, dict):
        msg = f"Block must be an object, got {type(data).__name__}"
        raise ValidationError(msg)

    block_id = data.get("id")
    if not isinstance(block_id, str) or not block_id:
        msg = f"Block id must be a non-empty string, got {block_id!r}"
        raise ValidationError(msg)

    try:
        block_type = BlockType(data.get("type"))
    except ValueError:
        msg = f"Unknown block type {data.get('type')!r} for block {block_id!r}"
        raise ValidationError(msg) from None

    content = data.get("content", "")
    if not isinstance(content, str):
        msg = f"Block {block_id!r} content must be a string"
        raise ValidationError(msg)

    raw_metadata = data.get("metadata")
    metadata = None if raw_metadata is None else _metadata_from_wire(raw_metadata, block_id)
    if metadata is not None and metadata.is_empty():
        metadata = None

    raw_children = data.get("children")
    if raw_children is None:
        raw_children = []
    if not isinstance(raw_children, list):
        msg = f"Block {block_id!r} children must be a list"
        raise ValidationError(msg)

    return Block(
        id=block_id,
        type=block_type,
        content=content,
        metadata=metadata,
        children=tuple(block_from_wire(child) for child in raw_children),
    )


def _metadata_from_wire(data: Any, block_id: str) -> BlockMetadata:
    if not isinstance(data, dict):
        msg = f"Block {block_id!r} metadata must be an object"
        raise ValidationError(msg)

    level = data.get("level")
    if level is not None and (
        isinstance(level, bool)
        or not isinstance(level, int)
        or not MIN_HEADING_LEVEL <= level <= MAX_HEADING_LEVEL
    ):
        msg = f"Block {block_id!r} heading level must be 1-6, got {level!r}"
        raise ValidationError(msg)

    checked = data.get("checked")
    if checked is not None and not isinstance(checked, bool):
        msg = f"Block {block_id!r} checked must be a boolean, got {checked!r}"
        raise ValidationError(msg)

    indent = data.get("indent")
    if indent is not None and (isinstance(indent, bool) or not isinstance(indent, int) or indent < 0):
        msg = f"Block {block_id!r} indent must be a non-negative integer, got {indent!r}"
        raise ValidationError(msg)

    return BlockMetadata(level=level, checked=checked, indent=indent)


def document_from_wire(data: Any) -> tuple[Block, ...]:
    """Parse a list of wire blocks, rejecting ids repeated anywhere in the tree."""
    if not isinstance(data, list):
        msg = "Document must be a list of blocks"
        raise ValidationError(msg)
    document = tuple(block_from_wire(b) for b in data)

    seen: set[str] = set()
    stack = list(document)
    while stack:
        block = stack.pop()
        if block.id in seen:
            msg = f"Duplicate block id: {block.id!r}"
            raise ValidationError(msg)
        seen.add(block.id)
        stack.extend(block.children)
    return document


def _timestamp_from_wire(value: Any, field: str) -> datetime:
    if not isinstance(value, str):
        msg = f"Note {field} must be an ISO 8601 string, got {value!r}"
        raise ValidationError(msg)
    stamp = datetime.fromisoformat(value)
    if stamp.tzinfo is None:
        msg = f"Note {field} must carry a UTC offset, got {value!r}"
        raise ValidationError(msg)
    return stamp.astimezone(UTC)


def note_from_wire(data: dict[str, Any]) -> Note:
    """Parse a wire note.

    The title must pass the same checks as a newly created note, the
    document must hold at least one block and timestamps must be
    timezone-aware (they are normalized to UTC).

    Raises:
        ValidationError: On missing fields or malformed values.
    """
    try:
        title = data["title"]
        if not isinstance(title, str):
            msg = f"Note title must be a string, got {title!r}"
            raise ValidationError(msg)
        document = document_from_wire(data["document"])
        if not document:
            msg = "Note document must contain at least one block"
            raise ValidationError(msg)
        is_public = data.get("isPublic", False)
        if not isinstance(is_public, bool):
            msg = f"Note isPublic must be a boolean, got {is_public!r}"
            raise ValidationError(msg)
        return Note(
            id=str(data["id"]),
            title=validate_title(title),
            owner_id=str(data["userId"]),
            document=document,
            created_at=_timestamp_from_wire(data["createdAt"], "createdAt"),
            updated_at=_timestamp_from_wire(data["updatedAt"], "updatedAt"),
            is_public=is_public,
        )
    except ValidationError:
        raise
    except KeyError as e:
        msg = f"Note is missing field {e.args[0]!r}"
        raise ValidationError(msg) from None
    except (TypeError, ValueError) as e:
        msg = f"Malformed note: {e}"
        raise ValidationError(msg) from e
