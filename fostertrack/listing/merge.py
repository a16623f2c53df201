from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from fostertrack.listing.pages import GroupListing
from fostertrack.listing.predicates import FostersNeededFilters
from fostertrack.listing.rules import (
    NEEDED_ANIMAL_RULES, NEEDED_GROUP_RULES, SINGLE_ONLY_FIELDS, translate_to_memory_predicate,
)
from fostertrack.models import Animal, FosterVisibility


class CandidateKind(StrEnum):
    ANIMAL = "animal"
    GROUP = "group"


@dataclass
class NeededItem:
    kind: CandidateKind
    record: Animal | GroupListing
    priority: bool
    created_at: datetime
    visibility: FosterVisibility

    @property
    def id(self) -> int:
        return self.record.id


def animal_candidates(animals: list[Animal]) -> list[Animal]:
    return [
        animal for animal in animals
        if animal.group_id is None and animal.foster_visibility != FosterVisibility.NOT_VISIBLE
    ]


def group_candidates(groups: list[GroupListing]) -> list[GroupListing]:
    # conflicting, empty and hidden groups are never listed
    return [group for group in groups if group.visibility.listable]


def included_kinds(filters: FostersNeededFilters) -> set[CandidateKind]:
    if filters.kind == "groups":
        kinds = {CandidateKind.GROUP}
    elif filters.kind == "singles":
        kinds = {CandidateKind.ANIMAL}
    else:
        kinds = {CandidateKind.ANIMAL, CandidateKind.GROUP}

    if any(getattr(filters, field) is not None for field in SINGLE_ONLY_FIELDS):
        kinds.discard(CandidateKind.GROUP)

    return kinds


def rank(items: list[NeededItem], filters: FostersNeededFilters) -> list[NeededItem]:
    ranked = sorted(items, key=lambda item: (item.kind != CandidateKind.ANIMAL, item.id))
    ranked.sort(key=lambda item: item.created_at, reverse=filters.sort_direction == "newest")
    ranked.sort(key=lambda item: not item.priority)
    return ranked


def merge_needed(
        animals: list[Animal], groups: list[GroupListing], filters: FostersNeededFilters, search: str = "",
) -> list[NeededItem]:
    kinds = included_kinds(filters)
    items = []

    if CandidateKind.ANIMAL in kinds:
        matches = translate_to_memory_predicate(filters, NEEDED_ANIMAL_RULES, search)
        items.extend(
            NeededItem(CandidateKind.ANIMAL, animal, animal.priority, animal.created_at, animal.foster_visibility)
            for animal in animal_candidates(animals)
            if matches(animal)
        )

    if CandidateKind.GROUP in kinds:
        matches = translate_to_memory_predicate(filters, NEEDED_GROUP_RULES, search)
        items.extend(
            NeededItem(CandidateKind.GROUP, group, group.priority, group.created_at, group.foster_visibility)
            for group in group_candidates(groups)
            if matches(group)
        )

    return rank(items, filters)
