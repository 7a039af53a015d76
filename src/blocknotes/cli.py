"""CLI for blocknotes (create, browse and edit notes, MCP server)."""

import json
import sqlite3
from collections.abc import Callable
from pathlib import Path
from typing import Annotated, Any

import typer
from loguru import logger

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
from blocknotes.logging_config import configure_logging
from blocknotes.mcp import server as tools

app = typer.Typer(help="blocknotes: notes made of nested blocks.")

UserOption = Annotated[
    str | None,
    typer.Option("--user", "-u", help=f"Acting user id (default: ${USER_ENV})"),
]
DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", "-d", help="Notes database directory"),
]
JsonOption = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _open_db(data_dir: Path | None) -> sqlite3.Connection:
    """Open (creating if needed) the notes database."""
    dst = resolve_data_directory(data_dir)
    dst.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(dst / DB_FILENAME))
    migrate_schema(conn)
    return conn


def _require_user(user: str | None) -> str:
    acting = resolve_acting_user(user)
    if acting is None:
        logger.error("No acting user: pass --user or set {}", USER_ENV)
        raise typer.Exit(1)
    return acting


def _run(
    data_dir: Path | None,
    call: Callable[[NoteService], dict[str, Any]],
    *,
    output_json: bool,
    render: Callable[[dict[str, Any]], None],
) -> None:
    conn = _open_db(data_dir)
    try:
        result = call(NoteService(SqliteNoteRepository(conn)))
    finally:
        conn.close()

    if "error" in result:
        if output_json:
            typer.echo(json.dumps(result, indent=2))
        else:
            typer.echo(f"Error: {result['error']}", err=True)
        raise typer.Exit(1)
    if output_json:
        typer.echo(json.dumps(result, indent=2))
    else:
        render(result)


def _print_outline(blocks: list[dict[str, Any]], depth: int = 0) -> None:
    for block in blocks:
        indent = "    " * depth
        metadata = block.get("metadata", {})
        flags = ""
        if "level" in metadata and block["type"] == "heading":
            flags = f" h{metadata['level']}"
        elif "checked" in metadata:
            flags = " [x]" if metadata["checked"] else " [ ]"
        typer.echo(f"  {indent}{block['id']}  {block['type']}{flags}  {block['content'][:60]}")
        _print_outline(block.get("children", []), depth + 1)


def _print_note(result: dict[str, Any]) -> None:
    note = result["note"]
    visibility = "public" if note["isPublic"] else "private"
    typer.echo(f"{note['title']}  [id={note['id']}, {visibility}, updated {note['updatedAt']}]")
    _print_outline(note["document"])


@app.command()
def new(
    title: str = typer.Argument(..., help="Note title"),
    user: UserOption = None,
    data_dir: DataDirOption = None,
    output_json: JsonOption = False,
) -> None:
    """Create a note with one empty paragraph."""
    acting = _require_user(user)
    _run(
        data_dir,
        lambda s: tools.notes_create(s, user=acting, title=title),
        output_json=output_json,
        render=_print_note,
    )


@app.command(name="list")
def list_cmd(
    public: bool = typer.Option(False, "--public", "-p", help="List public notes"),
    limit: int = typer.Option(DEFAULT_PAGE_SIZE, "--limit", "-n", help="Max results"),
    offset: int = typer.Option(0, "--offset", help="Pagination offset"),
    user: UserOption = None,
    data_dir: DataDirOption = None,
    output_json: JsonOption = False,
) -> None:
    """List notes, most recently updated first."""
    acting = _require_user(user)

    def render(result: dict[str, Any]) -> None:
        typer.echo(f"{result['total']} notes (showing {result['count']}):\n")
        for entry in result["notes"]:
            marker = " (public)" if entry["isPublic"] else ""
            typer.echo(f"  {entry['title']}{marker}  [id={entry['id']}]")
            typer.echo(f"    updated {entry['updatedAt']}  blocks={entry['blocks']}")

    _run(
        data_dir,
        lambda s: tools.notes_list(s, user=acting, public=public, limit=limit, offset=offset),
        output_json=output_json,
        render=render,
    )


@app.command()
def show(
    note_id: str = typer.Argument(..., help="Note ID"),
    ids: bool = typer.Option(False, "--ids", "-i", help="Show the block outline with ids"),
    user: UserOption = None,
    data_dir: DataDirOption = None,
    output_json: JsonOption = False,
) -> None:
    """Show a note as markdown (or its block outline / JSON)."""
    acting = _require_user(user)
    output_format = "json" if output_json or ids else "markdown"
    _run(
        data_dir,
        lambda s: tools.notes_read(s, user=acting, note_id=note_id, output_format=output_format),
        output_json=output_json,
        render=_print_note if ids else lambda r: typer.echo(r["content"], nl=False),
    )


@app.command()
def rename(
    note_id: str = typer.Argument(..., help="Note ID"),
    title: str = typer.Argument(..., help="New title"),
    user: UserOption = None,
    data_dir: DataDirOption = None,
    output_json: JsonOption = False,
) -> None:
    """Rename a note."""
    acting = _require_user(user)
    _run(
        data_dir,
        lambda s: tools.notes_rename(s, user=acting, note_id=note_id, title=title),
        output_json=output_json,
        render=_print_note,
    )


@app.command()
def edit(
    note_id: str = typer.Argument(..., help="Note ID"),
    block_id: str = typer.Argument(..., help="Block ID"),
    content: str = typer.Argument(..., help="New block text ('# Title' makes a heading)"),
    user: UserOption = None,
    data_dir: DataDirOption = None,
    output_json: JsonOption = False,
) -> None:
    """Set a block's text."""
    acting = _require_user(user)
    _run(
        data_dir,
        lambda s: tools.notes_edit_block(
            s, user=acting, note_id=note_id, block_id=block_id, content=content
        ),
        output_json=output_json,
        render=_print_note,
    )


@app.command()
def add(
    note_id: str = typer.Argument(..., help="Note ID"),
    block_type: str = typer.Option("paragraph", "--type", "-t", help="Block type"),
    after: Annotated[
        str | None,
        typer.Option("--after", "-a", help="Insert after this block (default: append)"),
    ] = None,
    user: UserOption = None,
    data_dir: DataDirOption = None,
    output_json: JsonOption = False,
) -> None:
    """Insert an empty block."""
    acting = _require_user(user)

    def render(result: dict[str, Any]) -> None:
        typer.echo(f"Added block {result['block_id']}")
        _print_note(result)

    _run(
        data_dir,
        lambda s: tools.notes_add_block(
            s, user=acting, note_id=note_id, block_type=block_type, after_id=after
        ),
        output_json=output_json,
        render=render,
    )


@app.command()
def remove(
    note_id: str = typer.Argument(..., help="Note ID"),
    block_id: str = typer.Argument(..., help="Block ID"),
    user: UserOption = None,
    data_dir: DataDirOption = None,
    output_json: JsonOption = False,
) -> None:
    """Delete a block and its nested blocks."""
    acting = _require_user(user)
    _run(
        data_dir,
        lambda s: tools.notes_remove_block(s, user=acting, note_id=note_id, block_id=block_id),
        output_json=output_json,
        render=_print_note,
    )


@app.command()
def toggle(
    note_id: str = typer.Argument(..., help="Note ID"),
    block_id: str = typer.Argument(..., help="Todo block ID"),
    user: UserOption = None,
    data_dir: DataDirOption = None,
    output_json: JsonOption = False,
) -> None:
    """Check or uncheck a todo."""
    acting = _require_user(user)
    _run(
        data_dir,
        lambda s: tools.notes_toggle_todo(s, user=acting, note_id=note_id, block_id=block_id),
        output_json=output_json,
        render=_print_note,
    )


@app.command()
def indent(
    note_id: str = typer.Argument(..., help="Note ID"),
    block_id: str = typer.Argument(..., help="List block ID"),
    out: bool = typer.Option(False, "--out", "-o", help="Outdent instead of indent"),
    levels: int = typer.Option(1, "--levels", "-l", help="Levels to outdent"),
    user: UserOption = None,
    data_dir: DataDirOption = None,
    output_json: JsonOption = False,
) -> None:
    """Nest a list block under its previous sibling, or lift it out with --out."""
    acting = _require_user(user)
    delta = -max(1, levels) if out else 1
    _run(
        data_dir,
        lambda s: tools.notes_indent_block(
            s, user=acting, note_id=note_id, block_id=block_id, delta=delta
        ),
        output_json=output_json,
        render=_print_note,
    )


@app.command()
def publish(
    note_id: str = typer.Argument(..., help="Note ID"),
    private: bool = typer.Option(False, "--private", help="Make the note private again"),
    user: UserOption = None,
    data_dir: DataDirOption = None,
    output_json: JsonOption = False,
) -> None:
    """Make a note public (or private with --private)."""
    acting = _require_user(user)
    _run(
        data_dir,
        lambda s: tools.notes_set_visibility(
            s, user=acting, note_id=note_id, is_public=not private
        ),
        output_json=output_json,
        render=_print_note,
    )


@app.command()
def delete(
    note_id: str = typer.Argument(..., help="Note ID"),
    user: UserOption = None,
    data_dir: DataDirOption = None,
    output_json: JsonOption = False,
) -> None:
    """Delete a note."""
    acting = _require_user(user)
    _run(
        data_dir,
        lambda s: tools.notes_delete(s, user=acting, note_id=note_id),
        output_json=output_json,
        render=lambda r: typer.echo(f"Deleted note {r['note_id']}"),
    )


@app.command()
def serve() -> None:
    """Start the MCP server (stdio transport)."""
    tools.run_mcp_server()
