"""Offset/limit windows over page-numbered listings.

The site only serves numbered pages and its page size is unknown until a
page has been fetched (and differs between layouts). ``collect_range``
keeps a page size estimate, derives the page number and the offset inside
that page from the current estimate on every iteration, and walks forward
until ``limit`` items are collected or the source runs out.
"""

import logging
from typing import Awaitable, Callable, List

from .dataclasses import PageResult, RangeResult, TrackSummary

DEFAULT_PAGE_SIZE = 12

logger = logging.getLogger(__name__)

PageFetcher = Callable[[int], Awaitable[PageResult]]


async def collect_range(fetch_page: PageFetcher, offset: int, limit: int,
                        default_page_size: int = DEFAULT_PAGE_SIZE) -> RangeResult:
    """Collect up to ``limit`` items starting at ``offset``.

    Args:
        fetch_page: Coroutine function returning the PageResult for a 1-based page number
        offset: Index of the first item to return (negative values are treated as 0)
        limit: Maximum number of items to return
        default_page_size: Initial page size estimate

    Returns:
        RangeResult whose ``items`` never exceed ``limit``
    """
    offset = max(0, offset)
    items: List[TrackSummary] = []
    total = 0
    page_size = default_page_size if default_page_size > 0 else DEFAULT_PAGE_SIZE
    cursor = offset
    realigned = False
    size_known = False

    while len(items) < limit:
        page_number = cursor // page_size + 1
        page = await fetch_page(page_number)

        # An inferred size (a short last page) never replaces a reported one.
        if page.page_size > 0 and (page.page_size_exact or not size_known):
            page_size = page.page_size
            size_known = page.page_size_exact
        total = page.total
        if not page.page_size_exact and page.items:
            total = max(total, (page_number - 1) * page_size + len(page.items))

        # A reported page size that differs from the estimate can move the
        # cursor onto another page; fetch that page once before slicing.
        expected_page = cursor // page_size + 1
        if page.page_size_exact and expected_page != page_number and not realigned:
            logger.debug(f"Page size is {page_size}, cursor {cursor} belongs to page {expected_page} not {page_number}")
            realigned = True
            continue
        realigned = False

        if not page.items:
            logger.debug(f"Page {page_number} is empty, stopping at cursor {cursor}")
            break

        start = cursor % page_size
        chunk = page.items[start:]
        if not chunk:
            break

        for summary in chunk:
            items.append(summary)
            cursor += 1
            if len(items) >= limit:
                break

        if cursor >= total:
            break

    has_more = offset + len(items) < total
    return RangeResult(
        items=items,
        total=total,
        next_offset=offset + len(items) if has_more else None,
        has_more=has_more,
    )
