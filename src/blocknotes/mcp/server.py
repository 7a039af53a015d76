"""MCP server exposing note editing tools."""

import asyncio
import sqlite3
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from blocknotes.config import (
    DB_FILENAME,
    DEFAULT_PAGE_SIZE,
    USER_ENV,
    resolve_acting_user,
    resolve_data_directory,
)
from blocknotes.core.database.schema import migrate_schema
from blocknotes.core.notes.service import NoteService
from blocknotes.core.repository.sqlite import SqliteNoteRepository
from blocknotes.core.tree.markdown import render_document_as_markdown
from blocknotes.core.wire import note_to_wire
from blocknotes.errors import BlockNotesError
from blocknotes.models.block import BlockType
from blocknotes.models.note import Note, NotePage


def _error(e: BlockNotesError) -> dict[str, Any]:
    return {"error": str(e), "kind": e.kind}


def _summary(note: Note) -> dict[str, Any]:
    return {
        "id": note.id,
        "title": note.title,
        "isPublic": note.is_public,
        "updatedAt": note.updated_at.isoformat(),
        "blocks": len(note.document),
    }


def _page_output(page: NotePage) -> dict[str, Any]:
    output: dict[str, Any] = {
        "notes": [_summary(n) for n in page.notes],
        "count": len(page.notes),
        "total": page.total,
        "has_more": page.has_more,
    }
    if page.has_more:
        output["next_offset"] = page.offset + page.limit
    return output


def _parse_block_type(block_type: str) -> BlockType | None:
    try:
        return BlockType(block_type)
    except ValueError:
        return None


# --- Core functions (testable without MCP context) ---


def notes_create(service: NoteService, *, user: str, title: str) -> dict[str, Any]:
    """Create a private note with one empty paragraph."""
    try:
        note = service.create_note(user, title)
    except BlockNotesError as e:
        return _error(e)
    return {"note": note_to_wire(note)}


def notes_list(
    service: NoteService,
    *,
    user: str,
    public: bool = False,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> dict[str, Any]:
    """List the user's notes, or all public notes, most recently updated first.

    Args:
        user: Acting user id.
        public: List public notes instead of the user's own.
        limit: Max results (capped to the repository page size).
        offset: Pagination offset.
    """
    if public:
        page = service.list_public_notes(limit=limit, offset=offset)
    else:
        page = service.list_notes(user, limit=limit, offset=offset)
    return _page_output(page)


def notes_read(
    service: NoteService,
    *,
    user: str,
    note_id: str,
    output_format: str = "markdown",
) -> dict[str, Any]:
    """Read a note as markdown or as its wire JSON.

    Args:
        user: Acting user id.
        note_id: Note to read.
        output_format: "markdown" (human-readable) or "json" (structured).
    """
    try:
        note = service.get_note(user, note_id)
    except BlockNotesError as e:
        return _error(e)

    if output_format == "json":
        return {"note": note_to_wire(note)}
    return {
        "note_id": note.id,
        "title": note.title,
        "content": render_document_as_markdown(note.document, title=note.title),
        "updatedAt": note.updated_at.isoformat(),
    }


def notes_rename(service: NoteService, *, user: str, note_id: str, title: str) -> dict[str, Any]:
    try:
        note = service.rename(user, note_id, title)
    except BlockNotesError as e:
        return _error(e)
    return {"note": note_to_wire(note)}


def notes_set_visibility(
    service: NoteService, *, user: str, note_id: str, is_public: bool
) -> dict[str, Any]:
    try:
        note = service.set_visibility(user, note_id, is_public)
    except BlockNotesError as e:
        return _error(e)
    return {"note": note_to_wire(note)}


def notes_edit_block(
    service: NoteService, *, user: str, note_id: str, block_id: str, content: str
) -> dict[str, Any]:
    """Set a block's content. Paragraph text like "## Title" becomes a heading."""
    try:
        note = service.edit_block(user, note_id, block_id, content)
    except BlockNotesError as e:
        return _error(e)
    return {"note": note_to_wire(note)}


def notes_add_block(
    service: NoteService,
    *,
    user: str,
    note_id: str,
    block_type: str = "paragraph",
    after_id: str | None = None,
) -> dict[str, Any]:
    """Insert an empty block after ``after_id`` (or at the end of the note).

    Args:
        user: Acting user id.
        note_id: Note to modify.
        block_type: paragraph, heading, todo, bullet-list, numbered-list or list-item.
        after_id: Block to insert after; None appends to the top level.
    """
    parsed = _parse_block_type(block_type)
    if parsed is None:
        valid = ", ".join(t.value for t in BlockType)
        return {
            "error": f"Unknown block type '{block_type}'. Expected one of: {valid}.",
            "kind": "validation",
        }
    try:
        note, block_id = service.insert_block_after(user, note_id, after_id, parsed)
    except BlockNotesError as e:
        return _error(e)
    return {"note": note_to_wire(note), "block_id": block_id}


def notes_remove_block(
    service: NoteService, *, user: str, note_id: str, block_id: str
) -> dict[str, Any]:
    try:
        note = service.delete_block(user, note_id, block_id)
    except BlockNotesError as e:
        return _error(e)
    return {"note": note_to_wire(note)}


def notes_toggle_todo(
    service: NoteService, *, user: str, note_id: str, block_id: str
) -> dict[str, Any]:
    try:
        note = service.toggle_todo(user, note_id, block_id)
    except BlockNotesError as e:
        return _error(e)
    return {"note": note_to_wire(note)}


def notes_indent_block(
    service: NoteService, *, user: str, note_id: str, block_id: str, delta: int = 1
) -> dict[str, Any]:
    try:
        note = service.indent_block(user, note_id, block_id, delta)
    except BlockNotesError as e:
        return _error(e)
    return {"note": note_to_wire(note)}


def notes_delete(service: NoteService, *, user: str, note_id: str) -> dict[str, Any]:
    try:
        service.delete_note(user, note_id)
    except BlockNotesError as e:
        return _error(e)
    return {"success": True, "note_id": note_id}


# --- MCP Server Setup ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    conn: sqlite3.Connection
    service: NoteService
    user: str | None
    data_dir: Path
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Open database on startup, close on shutdown."""
    data_dir = resolve_data_directory()
    data_dir.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(data_dir / DB_FILENAME))
    migrate_schema(conn)

    user = resolve_acting_user()
    if user is None:
        logger.warning("{} is not set; every tool call will be rejected", USER_ENV)

    try:
        service = NoteService(SqliteNoteRepository(conn))
        yield ServerContext(conn=conn, service=service, user=user, data_dir=data_dir)
    finally:
        conn.close()


mcp_server = FastMCP(
    "blocknotes",
    instructions="""\
Notes are ordered trees of blocks (paragraph, heading, todo, bullet-list,
numbered-list, list-item). Every block has an id that is unique within its note.

1. Use notes_list_tool to find a note, then notes_read_tool with
   output_format="json" to see block ids.
2. Edit with notes_edit_block_tool. Typing "# Title" (1-6 '#', a space, text)
   into a paragraph turns it into a heading.
3. Add blocks with notes_add_block_tool; toggle todos with notes_toggle_todo_tool.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


def _no_user() -> dict[str, Any]:
    return {"error": f"No acting user. Set {USER_ENV}.", "kind": "permission_denied"}


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def notes_create_tool(ctx: Context, title: str) -> dict[str, Any]:
    """Create a new private note with one empty paragraph.

    Args:
        title: Note title (1-255 characters).
    """
    server = _ctx(ctx)
    if server.user is None:
        return _no_user()
    async with server.lock:
        return notes_create(server.service, user=server.user, title=title)


@mcp_server.tool()
async def notes_list_tool(
    ctx: Context,
    public: bool = False,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> dict[str, Any]:
    """List your notes (or public notes), most recently updated first.

    Pagination: When has_more is true, use next_offset in a follow-up call.

    Args:
        public: List everyone's public notes instead of your own.
        limit: Max results (1-100).
        offset: Pagination offset.
    """
    server = _ctx(ctx)
    if server.user is None:
        return _no_user()
    async with server.lock:
        return notes_list(server.service, user=server.user, public=public, limit=limit, offset=offset)


@mcp_server.tool()
async def notes_read_tool(ctx: Context, note_id: str, output_format: str = "markdown") -> dict[str, Any]:
    """Read a note as markdown or structured JSON (JSON includes block ids).

    Args:
        note_id: Note id.
        output_format: "markdown" or "json".
    """
    server = _ctx(ctx)
    if server.user is None:
        return _no_user()
    async with server.lock:
        return notes_read(server.service, user=server.user, note_id=note_id, output_format=output_format)


@mcp_server.tool()
async def notes_rename_tool(ctx: Context, note_id: str, title: str) -> dict[str, Any]:
    """Rename a note you own."""
    server = _ctx(ctx)
    if server.user is None:
        return _no_user()
    async with server.lock:
        return notes_rename(server.service, user=server.user, note_id=note_id, title=title)


@mcp_server.tool()
async def notes_set_visibility_tool(ctx: Context, note_id: str, is_public: bool) -> dict[str, Any]:
    """Make a note you own public or private."""
    server = _ctx(ctx)
    if server.user is None:
        return _no_user()
    async with server.lock:
        return notes_set_visibility(server.service, user=server.user, note_id=note_id, is_public=is_public)


@mcp_server.tool()
async def notes_edit_block_tool(ctx: Context, note_id: str, block_id: str, content: str) -> dict[str, Any]:
    """Replace a block's text.

    Paragraph text starting with 1-6 '#' and a space becomes a heading.

    Args:
        note_id: Note id.
        block_id: Block id (from notes_read_tool with output_format="json").
        content: New text.
    """
    server = _ctx(ctx)
    if server.user is None:
        return _no_user()
    async with server.lock:
        return notes_edit_block(
            server.service, user=server.user, note_id=note_id, block_id=block_id, content=content
        )


@mcp_server.tool()
async def notes_add_block_tool(
    ctx: Context,
    note_id: str,
    block_type: str = "paragraph",
    after_id: str | None = None,
) -> dict[str, Any]:
    """Insert an empty block after another block, or at the end of the note.

    Args:
        note_id: Note id.
        block_type: paragraph, heading, todo, bullet-list, numbered-list or list-item.
        after_id: Block to insert after (any depth). Omit to append.
    """
    server = _ctx(ctx)
    if server.user is None:
        return _no_user()
    async with server.lock:
        return notes_add_block(
            server.service, user=server.user, note_id=note_id, block_type=block_type, after_id=after_id
        )


@mcp_server.tool()
async def notes_remove_block_tool(ctx: Context, note_id: str, block_id: str) -> dict[str, Any]:
    """Delete a block and everything nested under it."""
    server = _ctx(ctx)
    if server.user is None:
        return _no_user()
    async with server.lock:
        return notes_remove_block(server.service, user=server.user, note_id=note_id, block_id=block_id)


@mcp_server.tool()
async def notes_toggle_todo_tool(ctx: Context, note_id: str, block_id: str) -> dict[str, Any]:
    """Check or uncheck a todo block."""
    server = _ctx(ctx)
    if server.user is None:
        return _no_user()
    async with server.lock:
        return notes_toggle_todo(server.service, user=server.user, note_id=note_id, block_id=block_id)


@mcp_server.tool()
async def notes_indent_block_tool(ctx: Context, note_id: str, block_id: str, delta: int = 1) -> dict[str, Any]:
    """Indent (delta > 0) or outdent (delta < 0) a list block.

    Indenting nests the block under its previous sibling, one level at most.
    """
    server = _ctx(ctx)
    if server.user is None:
        return _no_user()
    async with server.lock:
        return notes_indent_block(
            server.service, user=server.user, note_id=note_id, block_id=block_id, delta=delta
        )


@mcp_server.tool()
async def notes_delete_tool(ctx: Context, note_id: str) -> dict[str, Any]:
    """Delete a note you own."""
    server = _ctx(ctx)
    if server.user is None:
        return _no_user()
    async with server.lock:
        return notes_delete(server.service, user=server.user, note_id=note_id)


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from blocknotes.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
