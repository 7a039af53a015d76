"""Block models: the nodes of a note's document tree."""

from dataclasses import dataclass
from enum import StrEnum


class BlockType(StrEnum):
    """Closed set of block variants."""

    PARAGRAPH = "paragraph"
    HEADING = "heading"
    TODO = "todo"
    BULLET_LIST = "bullet-list"
    NUMBERED_LIST = "numbered-list"
    LIST_ITEM = "list-item"


LIST_TYPES: frozenset[BlockType] = frozenset(
    {BlockType.BULLET_LIST, BlockType.NUMBERED_LIST, BlockType.LIST_ITEM}
)

MIN_HEADING_LEVEL = 1
MAX_HEADING_LEVEL = 6


@dataclass(frozen=True)
class BlockMetadata:
    """Type-specific block attributes. Unset fields fall back to defaults."""

    level: int | None = None
    checked: bool | None = None
    indent: int | None = None

    def merged(self, other: "BlockMetadata | None") -> "BlockMetadata":
        """Return a copy with every field set on ``other`` taking precedence."""
        if other is None:
            return self
        return BlockMetadata(
            level=other.level if other.level is not None else self.level,
            checked=other.checked if other.checked is not None else self.checked,
            indent=other.indent if other.indent is not None else self.indent,
        )

    def is_empty(self) -> bool:
        return self.level is None and self.checked is None and self.indent is None


@dataclass(frozen=True)
class Block:
    """A single node in a note's document tree."""

    id: str
    type: BlockType
    content: str = ""
    metadata: BlockMetadata | None = None
    children: tuple["Block", ...] = ()

    @property
    def level(self) -> int:
        if self.metadata is None or self.metadata.level is None:
            return MIN_HEADING_LEVEL
        return self.metadata.level

    @property
    def checked(self) -> bool:
        if self.metadata is None or self.metadata.checked is None:
            return False
        return self.metadata.checked

    @property
    def indent(self) -> int:
        if self.metadata is None or self.metadata.indent is None:
            return 0
        return self.metadata.indent

    @property
    def is_list(self) -> bool:
        return self.type in LIST_TYPES


def default_metadata(block_type: BlockType) -> BlockMetadata | None:
    """Metadata a freshly created block of ``block_type`` starts with."""
    match block_type:
        case BlockType.HEADING:
            return BlockMetadata(level=MIN_HEADING_LEVEL)
        case BlockType.TODO:
            return BlockMetadata(checked=False)
        case BlockType.BULLET_LIST | BlockType.NUMBERED_LIST | BlockType.LIST_ITEM:
            return BlockMetadata(indent=0)
        case BlockType.PARAGRAPH:
            return None
