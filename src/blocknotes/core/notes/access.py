"""Read/write authorization for notes."""

from blocknotes.errors import PermissionDenied
from blocknotes.models.note import Note


def can_read(acting_user: str, note: Note) -> bool:
    return note.owner_id == acting_user or note.is_public


def can_write(acting_user: str, note: Note) -> bool:
    return note.owner_id == acting_user


def require_read(acting_user: str, note: Note) -> None:
    if not can_read(acting_user, note):
        msg = f"User {acting_user!r} may not read note {note.id!r}"
        raise PermissionDenied(msg)


def require_write(acting_user: str, note: Note) -> None:
    if not can_write(acting_user, note):
        msg = f"User {acting_user!r} may not modify note {note.id!r}"
        raise PermissionDenied(msg)
