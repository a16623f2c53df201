from __future__ import annotations

from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fostertrack.db.query import Sort
from fostertrack.models import AnimalStatus, SexSpayNeuterStatus, LifeStage, FosterVisibility

SortDirection = Literal["newest", "oldest"]


class BaseFilters(BaseModel):
    """
    Sparse filter record. A field left as None is not filtered on.

    Single-state flags (`priority`) only filter when True, so False is normalized to None.
    Tri-state flags (`inGroup` on animals) keep False as a distinct, active value.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    default_sort: ClassVar[SortDirection] = "newest"

    priority: bool | None = None
    sort_by_created_at: SortDirection | None = Field(default=None, alias="sortByCreatedAt")

    @field_validator("*", mode="before")
    def empty_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("priority")
    def priority_false_to_none(cls, value: bool | None) -> bool | None:
        return True if value else None

    @property
    def sort_direction(self) -> SortDirection:
        return self.sort_by_created_at or self.default_sort

    def sort(self) -> Sort:
        return Sort("created_at", descending=self.sort_direction == "newest")

    def _count_base(self) -> int:
        count = 0
        if self.priority is True:
            count += 1
        if self.sort_by_created_at is not None and self.sort_by_created_at != self.default_sort:
            count += 1
        return count

    def count_active(self) -> int:
        return self._count_base()


class AnimalFilters(BaseFilters):
    sex: SexSpayNeuterStatus | None = None
    life_stage: LifeStage | None = None
    in_group: bool | None = Field(default=None, alias="inGroup")
    status: AnimalStatus | None = None
    foster_visibility: FosterVisibility | None = None

    def count_active(self) -> int:
        count = self._count_base()
        if self.sex is not None:
            count += 1
        if self.life_stage is not None:
            count += 1
        # explicit False is an active filter too
        if self.in_group is not None:
            count += 1
        if self.status is not None:
            count += 1
        if self.foster_visibility is not None:
            count += 1
        return count


class GroupFilters(BaseFilters):
    foster_visibility: FosterVisibility | None = None

    def count_active(self) -> int:
        return self._count_base() + (self.foster_visibility is not None)


class FostersNeededFilters(BaseFilters):
    default_sort: ClassVar[SortDirection] = "oldest"

    sex: SexSpayNeuterStatus | None = None
    life_stage: LifeStage | None = None
    availability: FosterVisibility | None = None
    status: AnimalStatus | None = None
    kind: Literal["groups", "singles"] | None = Field(default=None, alias="type")

    @field_validator("kind", mode="before")
    def both_to_none(cls, value: str | None) -> str | None:
        if value == "both":
            return None
        return value

    @field_validator("availability")
    def availability_is_visible(cls, value: FosterVisibility | None) -> FosterVisibility | None:
        if value == FosterVisibility.NOT_VISIBLE:
            raise ValueError("not_visible animals are never listed as needing a foster")
        return value

    def count_active(self) -> int:
        count = self._count_base()
        for value in (self.sex, self.life_stage, self.availability, self.status, self.kind):
            if value is not None:
                count += 1
        return count


def count_active(filters: BaseFilters) -> int:
    return filters.count_active()
