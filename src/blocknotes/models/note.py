"""Note aggregate value."""

from dataclasses import dataclass
from datetime import datetime

from blocknotes.models.block import Block


@dataclass(frozen=True)
class Note:
    """A note: identity, ownership, visibility and a document of blocks."""

    id: str
    title: str
    owner_id: str
    document: tuple[Block, ...]
    created_at: datetime
    updated_at: datetime
    is_public: bool = False


@dataclass(frozen=True)
class NotePage:
    """One page of a listing."""

    notes: tuple[Note, ...]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.notes) < self.total
