"""Search, filter and pagination helpers shared by the listing services."""

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass

type Predicate[T] = Callable[[T], bool]


@dataclass
class Page[T]:
    """One page of a filtered listing."""

    items: list[T]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)


def paginate[T](items: Sequence[T], page: int = 1, limit: int = 10) -> Page[T]:
    """Slice ``items[(page-1)*limit : page*limit]``.

    Args:
        items: Fully filtered sequence
        page: 1-based page number
        limit: Page size

    Returns:
        The page with the total count of ``items``
    """
    start = (page - 1) * limit
    return Page(items=list(items[start : start + limit]), page=page, limit=limit, total=len(items))


def matches_search(search: str | None, *values: str | None) -> bool:
    """Case-insensitive substring match of ``search`` against any of ``values``.

    An empty or missing search matches everything.
    """
    if not search:
        return True
    needle = search.lower()
    return any(needle in value.lower() for value in values if value)


def apply_filters[T](items: Sequence[T], predicates: Sequence[Predicate[T]]) -> list[T]:
    """Keep the items satisfying every predicate."""
    return [item for item in items if all(predicate(item) for predicate in predicates)]
