from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    page: int
    page_size: int
    total: int

    @property
    def total_pages(self) -> int:
        return max(1, -(-self.total // self.page_size))

    def as_dict(self, items: list) -> dict:
        return {
            "items": items,
            "page": self.page,
            "page_size": self.page_size,
            "total": self.total,
            "total_pages": self.total_pages,
        }


def paginate(items: Sequence[T], *, page: int, page_size: int) -> Page[T]:
    """Slice a list for one page, clamping the page into the valid range."""

    page_size = max(1, int(page_size))
    total = len(items)
    total_pages = max(1, -(-total // page_size))
    page = min(max(1, int(page)), total_pages)
    start = (page - 1) * page_size
    return Page(items=list(items[start : start + page_size]), page=page, page_size=page_size, total=total)
