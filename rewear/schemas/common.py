"""Shared response envelopes - pagination and simple acknowledgements."""

from math import ceil
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, *, page: int, limit: int, total: int) -> "Pagination":
        total_pages = ceil(total / limit) if limit else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total=total,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class Page(BaseModel, Generic[T]):
    items: list[T]
    pagination: Pagination


class MessageResponse(BaseModel):
    message: str
