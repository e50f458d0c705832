"""Pagination value objects shared by all repositories."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass
class PaginatedResult(Generic[T]):
    """One page of results plus the total across all pages."""

    items: list[T] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 20
    total_pages: int = 0

    @classmethod
    def build(cls, items: list[T], total: int, page: int, limit: int) -> "PaginatedResult[T]":
        return cls(
            items=items,
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if limit else 0,
        )
