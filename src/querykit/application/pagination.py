"""
Pagination arithmetic for listing queries.

Rendering page links is left to the view layer; this only works out offsets
and page counts and applies them to a query builder.
"""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from querykit.infrastructure.database.query_builder import QueryBuilder


@dataclass
class Paginator:
    """
    Page window over ``total`` items, ``per_page`` at a time.

    Pages are one-based; a page below 1 is treated as page 1.
    """

    page: int
    per_page: int
    total: int

    def __post_init__(self) -> None:
        self.page = max(int(self.page), 1)
        self.per_page = int(self.per_page)
        self.total = max(int(self.total), 0)
        if self.per_page < 1:
            raise ValueError(f"per_page must be at least 1, got {self.per_page}")

    @classmethod
    def for_query(cls, query: "QueryBuilder", page: Any, per_page: Any) -> "Paginator":
        """Count the query's rows, then return a paginator already applied to it."""
        paginator = cls(page=page, per_page=per_page, total=query.count())
        paginator.apply(query)
        return paginator

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.per_page)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    def apply(self, query: "QueryBuilder") -> "QueryBuilder":
        """Set LIMIT/OFFSET for the current page."""
        return query.limit(self.per_page).offset(self.offset)
