import dataclasses
from typing import Awaitable, Callable, List, Optional, TypeVar

from .models import Page, Paging

T = TypeVar("T")

PAGE_LIMIT = 50
MAX_RESULTS = 100

PageFetch = Callable[[Page], Awaitable[Optional[Paging[T]]]]


async def collect_pages(fetch: PageFetch) -> List[T]:
    """Walk pages of PAGE_LIMIT items until a short page, an empty page or MAX_RESULTS.

    fetch(page) returns None when it has nothing for the requested kind; that counts
    as an empty page. Pages are requested strictly one after another.
    """

    results: List[T] = []
    page = Page(limit=PAGE_LIMIT)

    while True:
        paging = await fetch(dataclasses.replace(page))
        if paging is not None:
            results.extend(paging.items)
            page.offset += PAGE_LIMIT

        count = paging.count if paging is not None else 0
        if count <= 0 or len(results) >= MAX_RESULTS or count < PAGE_LIMIT:
            break

    # A server that ignores `limit` could overshoot the cap.
    del results[MAX_RESULTS:]
    return results
