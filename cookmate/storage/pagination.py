from __future__ import annotations

import math
from typing import Generic, TypeVar

from pydantic import BaseModel

from ..errors import ValidationError

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    items: list[T]
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool


def page_window(page: int, limit: int, max_limit: int) -> tuple[int, int]:
    """Validate paging arguments and return ``(skip, limit)``."""
    if page < 1:
        raise ValidationError("Page must be a positive integer")
    if not 1 <= limit <= max_limit:
        raise ValidationError(f"Limit must be between 1 and {max_limit}")
    return (page - 1) * limit, limit


def build_page(items: list[T], total: int, page: int, limit: int) -> Page[T]:
    total_pages = math.ceil(total / limit) if limit else 0
    return Page(
        items=items,
        current_page=page,
        total_pages=total_pages,
        total_items=total,
        items_per_page=limit,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )
