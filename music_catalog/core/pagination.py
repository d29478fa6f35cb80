from dataclasses import dataclass
from typing import Any, Optional, Sequence, TypeVar

from music_catalog.core.errors import PageOutOfRangeError

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_SONGS_LIMIT = 10
DEFAULT_VERSE_LIMIT = 3


@dataclass(frozen=True)
class Window:
    """Half-open [start, end) range over a zero-based sequence."""
    start: int
    end: int

    def slice(self, items: Sequence[T]) -> Sequence[T]:
        return items[self.start:self.end]


def coerce_positive(value: Optional[Any], default: int) -> int:
    """
    Turn a raw page / page-size query value into a positive int.

    Missing, zero, negative and non-numeric values become `default`.
    """
    if value is None:
        return default
    try:
        number = int(str(value).strip())
    except ValueError:
        return default
    return number if number >= 1 else default


def paginate(total: int, page: int, page_size: int) -> Window:
    """
    Compute the window for a 1-based page.

    Args:
        total: Length of the sequence being paged.
        page: 1-based page number.
        page_size: Items per page.

    Returns:
        Window with start = (page-1)*page_size and end capped at total.

    Raises:
        PageOutOfRangeError: If the page starts at or past the end. The first
            page is always valid, so an empty sequence yields an empty window.
    """
    page = max(page, 1)
    page_size = max(page_size, 1)

    start = (page - 1) * page_size
    if start >= total and page > 1:
        raise PageOutOfRangeError(f"Page {page} out of range ({total} items, {page_size} per page)")

    end = min(start + page_size, total)
    return Window(start=start, end=end)
