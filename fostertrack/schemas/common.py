from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PaginationResponse(BaseModel, Generic[T]):
    count: int
    active_filters: int = 0
    page: int
    page_size: int
    total_pages: int
    result: list[T]
