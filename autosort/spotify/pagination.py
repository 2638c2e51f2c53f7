"""Helpers for Spotify's offset/limit paging.

Two shapes are provided:

  - fetch_all(): learns the total from the first page, then fetches every
    remaining page concurrently. A failed page is logged and skipped, so the
    result may be short; callers must not assume completeness.
  - PageCursor: a lazy iterator over items that requests one page at a time.
    Iterating it again starts over from offset 0.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
import math
from typing import Any, Callable, Dict, Generic, Iterator, List, TypeVar

from autosort.config import PAGE_FETCH_WORKERS
from autosort.core import log_warning

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    items: List[T]
    total: int
    offset: int
    limit: int


# fetch_page(limit, offset) -> Page
FetchPage = Callable[[int, int], Page]


def page_from_response(data: Dict[str, Any], offset: int, limit: int) -> Page:
    items = data.get("items") or []
    total = data.get("total")
    if not isinstance(total, int):
        total = offset + len(items)
    return Page(items=list(items), total=total, offset=offset, limit=limit)


def fetch_all(
    fetch_page: FetchPage,
    page_size: int,
    *,
    max_workers: int = PAGE_FETCH_WORKERS,
    label: str = "items",
) -> List[Any]:
    first = fetch_page(page_size, 0)
    items: List[Any] = list(first.items)

    if len(items) >= first.total or not first.items:
        return items

    remaining = first.total - len(items)
    extra_pages = math.ceil(remaining / page_size)
    offsets = [page_size * i for i in range(1, extra_pages + 1)]

    pages: Dict[int, List[Any]] = {}
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(offsets)))) as executor:
        futures = {
            executor.submit(fetch_page, page_size, offset): offset for offset in offsets
        }
        for future in as_completed(futures):
            offset = futures[future]
            try:
                pages[offset] = list(future.result().items)
            except Exception as exc:  # noqa: BLE001
                log_warning(
                    f"Failed to fetch {label} page at offset {offset} "
                    f"({type(exc).__name__}); continuing with partial results."
                )

    for offset in sorted(pages):
        items.extend(pages[offset])
    return items


class PageCursor(Generic[T]):
    """
    Lazy, restartable iteration over a paged collection.

    Stops on an empty page or once `total` items have been seen.
    """

    def __init__(self, fetch_page: FetchPage, page_size: int):
        self._fetch_page = fetch_page
        self.page_size = page_size

    def pages(self) -> Iterator[Page]:
        offset = 0
        while True:
            page = self._fetch_page(self.page_size, offset)
            if not page.items:
                return
            yield page
            offset += len(page.items)
            if offset >= page.total:
                return

    def __iter__(self) -> Iterator[T]:
        for page in self.pages():
            yield from page.items
