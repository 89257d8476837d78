import math
from typing import Generic, TypeVar

import attrs


_T = TypeVar('_T')


@attrs.define(frozen=True)
class Page(Generic[_T]):
    items: list[_T]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1
