"""
Pagination result for pagealchemy.

This module provides the page result returned by the paginator together with
the window arithmetic (offset and max page), so that API backends can return
page metadata to frontends.
"""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def offset(page: int, limit: int) -> int:
    """Number of rows skipped before the given 1-based page starts."""
    return (page - 1) * limit


def max_page(total: int, limit: int) -> int:
    """
    Computes the last page number for a total and a page size.

    A partial last page counts as a page and an empty result set still has
    exactly one (empty) page, so the result is never below 1.

    Args:
        total: Total number of matching records (>= 0)
        limit: Page size (> 0)
    """
    raw = total / limit
    pages = math.floor(raw)

    if pages < raw:
        pages += 1
    elif pages == 0:
        pages = 1

    return pages


class PageResult(BaseModel, Generic[T]):
    """
    Represents a single page of results with its page metadata.

    Serializes (with by_alias=True) to currentPage, maxPage, recordsPerPage,
    totalRecords and records.

    Attributes:
        current_page: The 1-based page number that was requested
        max_page: Last page number, at least 1
        records_per_page: The page size used for the fetch
        total_records: Number of records matching the query, across all pages
        records: The destination list the fetch populated
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    current_page: int
    max_page: int
    records_per_page: int
    total_records: int
    records: list[T]

    @classmethod
    def from_records(
        cls, records: list[T], *, page: int, limit: int, total: int
    ) -> "PageResult[T]":
        """
        Builds a result around an already populated list.

        Validation is skipped so that `records` stays the very list the fetch
        wrote into instead of a validated copy.
        """
        return cls.model_construct(
            current_page=page,
            max_page=max_page(total, limit),
            records_per_page=limit,
            total_records=total,
            records=records,
        )

    @property
    def is_first_page(self) -> bool:
        """Returns True if the current page is the first page."""
        return self.current_page <= 1

    @property
    def is_last_page(self) -> bool:
        """Returns True if there are no pages after the current one."""
        return self.current_page >= self.max_page
