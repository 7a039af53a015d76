"""Pagination bounds shared by repository implementations."""

from blocknotes.config import MAX_PAGE_SIZE


def clamp_page(limit: int, offset: int) -> tuple[int, int]:
    """Clamp ``limit`` to 1..MAX_PAGE_SIZE and ``offset`` to >= 0."""
    return max(1, min(limit, MAX_PAGE_SIZE)), max(0, offset)
