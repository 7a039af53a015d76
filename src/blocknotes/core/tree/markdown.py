"""Render a note's document tree as markdown."""

import io

from blocknotes.models.block import Block, BlockType


def render_document_as_markdown(
    document: tuple[Block, ...],
    *,
    title: str | None = None,
) -> str:
    """Render blocks as markdown, nesting children four spaces deeper.

    Args:
        document: Top-level blocks of a note.
        title: Optional note title, emitted as a leading level-1 heading.

    Returns:
        Markdown string, one line (or more for multi-line content) per block.
    """
    out = io.StringIO()
    if title:
        out.write(f"# {title}\n\n")
    _render_level(out, document, depth=0, numbered=False)
    return out.getvalue()


def _render_level(out: io.StringIO, blocks: tuple[Block, ...], *, depth: int, numbered: bool) -> None:
    number = 0
    for block in blocks:
        indent = "    " * depth
        match block.type:
            case BlockType.HEADING:
                _write_content(out, indent, "#" * block.level + " ", block.content)
            case BlockType.TODO:
                _write_content(out, indent, "- [x] " if block.checked else "- [ ] ", block.content)
            case BlockType.LIST_ITEM:
                number += 1
                _write_content(out, indent, f"{number}. " if numbered else "- ", block.content)
            case BlockType.BULLET_LIST | BlockType.NUMBERED_LIST:
                # An untitled list container contributes no line of its own
                is_numbered = block.type == BlockType.NUMBERED_LIST
                if block.content:
                    _write_content(out, indent, "", block.content)
                    _render_level(out, block.children, depth=depth + 1, numbered=is_numbered)
                else:
                    _render_level(out, block.children, depth=depth, numbered=is_numbered)
                continue
            case BlockType.PARAGRAPH:
                _write_content(out, indent, "", block.content)

        if block.children:
            _render_level(out, block.children, depth=depth + 1, numbered=False)


def _write_content(out: io.StringIO, indent: str, prefix: str, content: str) -> None:
    lines = content.split("\n")
    out.write(f"{indent}{prefix}{lines[0]}\n")
    for line in lines[1:]:
        out.write(f"{indent}  {line}\n")
