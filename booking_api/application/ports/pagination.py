from dataclasses import dataclass
from typing import Generic, List, TypeVar

from ...utils import total_pages

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    items: List[T]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return total_pages(self.total, self.limit)

    def pagination(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
        }


def offset_for(page: int, limit: int) -> int:
    return (page - 1) * limit
