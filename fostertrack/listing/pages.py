from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from math import ceil
from typing import Generic, Mapping, TypeVar

from fostertrack.config import config
from fostertrack.listing.params import clamp_page_size, decode_params, encode_params
from fostertrack.listing.predicates import BaseFilters
from fostertrack.models import Animal, AnimalGroup, FosterVisibility
from fostertrack.utils.group_visibility import GroupVisibility

T = TypeVar("T")
TFilters = TypeVar("TFilters", bound=BaseFilters)


class ListingPath(StrEnum):
    SERVER = "server"
    CLIENT = "client"


@dataclass(frozen=True)
class ListingRequest(Generic[TFilters]):
    filters: TFilters
    search: str = ""
    page: int = 1
    page_size: int = field(default_factory=lambda: config.default_page_size)

    def __post_init__(self) -> None:
        object.__setattr__(self, "page_size", clamp_page_size(self.page_size))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @classmethod
    def from_params(cls, filters_cls: type[TFilters], params: Mapping[str, str]) -> ListingRequest[TFilters]:
        decoded = decode_params(filters_cls, params)
        return cls(decoded.filters, decoded.search, decoded.page, decoded.page_size)

    def to_params(self) -> dict[str, str]:
        return encode_params(self.filters, self.search, self.page, self.page_size)


@dataclass
class ListingPage(Generic[T]):
    items: list[T]
    total: int
    page: int
    page_size: int
    path: ListingPath

    @property
    def total_pages(self) -> int:
        return ceil(self.total / self.page_size) if self.page_size else 0


@dataclass
class GroupListing:
    """Group projected together with its resolved members and derived visibility."""

    group: AnimalGroup
    members: list[Animal]
    visibility: GroupVisibility

    @property
    def id(self) -> int:
        return self.group.id

    @property
    def organization_id(self) -> int:
        return self.group.organization_id

    @property
    def name(self) -> str | None:
        return self.group.name

    @property
    def priority(self) -> bool:
        return self.group.priority

    @property
    def created_at(self) -> datetime:
        return self.group.created_at

    @property
    def foster_visibility(self) -> FosterVisibility | None:
        return self.visibility.shared_value


def paginate(records: list[T], page: int, page_size: int) -> list[T]:
    start = (page - 1) * page_size
    return records[start:start + page_size]
