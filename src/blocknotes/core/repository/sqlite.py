"""SQLite-backed note repository.

Each note is one row; the document tree is stored as its wire JSON.
Timestamps are kept as integer microseconds since the epoch (UTC).
"""

import json
import sqlite3
from datetime import UTC, datetime, timedelta

from loguru import logger

from blocknotes.core.repository.paging import clamp_page
from blocknotes.core.wire import block_to_wire, document_from_wire
from blocknotes.errors import NotFound, ValidationError
from blocknotes.models.note import Note, NotePage

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_COLUMNS = "id, owner_id, title, document, is_public, created_us, updated_us"


def _to_us(stamp: datetime) -> int:
    return (stamp - _EPOCH) // timedelta(microseconds=1)


def _from_us(value: int) -> datetime:
    return _EPOCH + timedelta(microseconds=value)


def _row_to_note(row: sqlite3.Row | tuple) -> Note:
    return Note(
        id=row[0],
        owner_id=row[1],
        title=row[2],
        document=document_from_wire(json.loads(row[3])),
        is_public=bool(row[4]),
        created_at=_from_us(row[5]),
        updated_at=_from_us(row[6]),
    )


def _note_params(note: Note) -> tuple[str, str, str, str, int, int, int]:
    document = json.dumps([block_to_wire(b) for b in note.document], separators=(",", ":"))
    return (
        note.id,
        note.owner_id,
        note.title,
        document,
        int(note.is_public),
        _to_us(note.created_at),
        _to_us(note.updated_at),
    )


class SqliteNoteRepository:
    """Note store on a SQLite connection (schema must already exist)."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def create(self, note: Note) -> Note:
        try:
            self.conn.execute(
                f"INSERT INTO notes ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                _note_params(note),
            )
        except sqlite3.IntegrityError:
            self.conn.rollback()
            msg = f"Note {note.id!r} already exists"
            raise ValidationError(msg) from None
        self.conn.commit()
        logger.debug("Created note {}", note.id)
        return note

    def get_by_id(self, note_id: str) -> Note:
        row = self.conn.execute(
            f"SELECT {_COLUMNS} FROM notes WHERE id = ?", (note_id,)
        ).fetchone()
        if row is None:
            msg = f"Note {note_id!r} not found"
            raise NotFound(msg)
        return _row_to_note(row)

    def list_by_owner(self, owner_id: str, limit: int, offset: int) -> NotePage:
        return self._page("owner_id = ?", [owner_id], limit, offset)

    def list_public(self, limit: int, offset: int) -> NotePage:
        return self._page("is_public = 1", [], limit, offset)

    def update(self, note: Note) -> Note:
        note_id, *values = _note_params(note)
        cur = self.conn.execute(
            "UPDATE notes SET owner_id = ?, title = ?, document = ?, is_public = ?, "
            "created_us = ?, updated_us = ? WHERE id = ?",
            (*values, note_id),
        )
        if cur.rowcount == 0:
            self.conn.rollback()
            msg = f"Note {note.id!r} not found"
            raise NotFound(msg)
        self.conn.commit()
        return note

    def delete(self, note_id: str) -> None:
        cur = self.conn.execute("DELETE FROM notes WHERE id = ?", (note_id,))
        if cur.rowcount == 0:
            self.conn.rollback()
            msg = f"Note {note_id!r} not found"
            raise NotFound(msg)
        self.conn.commit()
        logger.debug("Deleted note {}", note_id)

    def _page(self, where_sql: str, params: list[str | int], limit: int, offset: int) -> NotePage:
        limit, offset = clamp_page(limit, offset)
        total = self.conn.execute(
            f"SELECT COUNT(*) FROM notes WHERE {where_sql}", params
        ).fetchone()[0]
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM notes WHERE {where_sql} "
            "ORDER BY updated_us DESC LIMIT ? OFFSET ?",
            [*params, limit, offset],
        ).fetchall()
        return NotePage(
            notes=tuple(_row_to_note(r) for r in rows),
            total=total,
            limit=limit,
            offset=offset,
        )
