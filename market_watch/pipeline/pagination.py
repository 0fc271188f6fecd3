"""
TCG Market Watch — Pagination Fetcher

Drains an offset/limit list endpoint. A page shorter than the requested
limit is the last one.
"""

from __future__ import annotations

import time
from typing import Callable, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def fetch_all_pages(
    fetch_page: Callable[[int, int], list[T]],
    limit: int = 100,
    delay_seconds: float = 0.0,
    label: str = "items",
) -> list[T]:
    """
    Call fetch_page(offset, limit) with offset = limit × page until a short page.

    Args:
        fetch_page: Remote list operation taking (offset, limit).
        limit: Page size requested from the remote.
        delay_seconds: Blocking pause after each full page, before the next
            request. Never applied after the final page.
        label: Name used in log events.

    Returns:
        Concatenation of every page, in request order.

    Raises:
        Whatever fetch_page raises; nothing gathered by this call is returned.
    """
    if limit <= 0:
        raise ValueError("limit must be positive")

    items: list[T] = []
    page = 0

    while True:
        batch = fetch_page(limit * page, limit)
        items.extend(batch)

        logger.debug(
            "pagination_page_fetched",
            label=label,
            page=page,
            page_count=len(batch),
            fetched_so_far=len(items),
        )

        if len(batch) < limit:
            break

        page += 1
        if delay_seconds > 0:
            time.sleep(delay_seconds)

    logger.info("pagination_complete", label=label, pages=page + 1, total=len(items))
    return items
