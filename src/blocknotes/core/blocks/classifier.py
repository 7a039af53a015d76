"""Recognize type-changing input typed into a paragraph block."""

import re
from dataclasses import dataclass

from blocknotes.models.block import BlockMetadata, BlockType

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")


@dataclass(frozen=True)
class Classification:
    """Block type, normalized content and metadata implied by raw text."""

    type: BlockType
    content: str
    metadata: BlockMetadata


def classify(raw_text: str) -> Classification | None:
    """Classify committed paragraph text.

    ``"## Section"`` becomes a level-2 heading with content ``"Section"``.
    Anything unrecognized returns None and the block keeps its type.
    """
    match = _HEADING_RE.match(raw_text.strip())
    if match is None:
        return None
    hashes, remainder = match.groups()
    return Classification(
        type=BlockType.HEADING,
        content=remainder,
        metadata=BlockMetadata(level=len(hashes)),
    )
