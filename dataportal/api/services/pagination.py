"""
Result Navigator
Computes previous/next and page-number links for paged result lists.
"""

import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional

DEFAULT_PAGE_SIZE = 10
DEFAULT_WINDOW = 10


def page_offset(page_index: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
    """Offset of the first hit on a (0-indexed) page."""
    return page_index * page_size


@dataclass
class PageLink:
    """Link to a single result page."""

    number: int  # 1-indexed, as displayed
    offset: int
    href: str
    current: bool = False


@dataclass
class Navigator:
    """
    Navigation state for one result page.

    ``prev_href`` / ``next_href`` are None when there is no such page.
    """

    page: int
    pages: int
    links: List[PageLink] = field(default_factory=list)
    prev_href: Optional[str] = None
    next_href: Optional[str] = None

    @property
    def has_prev(self) -> bool:
        return self.prev_href is not None

    @property
    def has_next(self) -> bool:
        return self.next_href is not None


def build_navigator(
    total_count: int,
    offset: int,
    href: Callable[[int], str],
    page_size: int = DEFAULT_PAGE_SIZE,
    window: int = DEFAULT_WINDOW,
) -> Navigator:
    """
    Build the navigator for the page starting at offset.

    Page numbers are listed from ``window`` pages before the current page up
    to (but excluding) ``window`` pages after it, clipped to existing pages.

    Args:
        total_count: Total number of hits
        offset: Offset of the current page
        href: Builds the link URL for a given offset
        page_size: Hits per page
        window: Number of page links on each side of the current page

    Returns:
        Navigator with links for the current page
    """
    if page_size <= 0:
        raise ValueError("page_size must be positive")

    pages = math.ceil(max(total_count, 0) / page_size)
    page = max(offset, 0) // page_size

    start = max(page - window, 0)
    stop = min(pages, page + window)
    links = [
        PageLink(
            number=i + 1,
            offset=page_offset(i, page_size),
            href=href(page_offset(i, page_size)),
            current=(i == page),
        )
        for i in range(start, stop)
    ]

    navigator = Navigator(page=page, pages=pages, links=links)
    if page > 0:
        navigator.prev_href = href(page_offset(page - 1, page_size))
    if page < pages - 1:
        navigator.next_href = href(page_offset(page + 1, page_size))
    return navigator
