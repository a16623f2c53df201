from __future__ import annotations

from typing import Iterable, Mapping, NamedTuple

from loguru import logger

from fostertrack.models import Animal, AnimalGroup, FosterVisibility

VisibilityOverrides = Mapping[int, FosterVisibility]


class GroupVisibility(NamedTuple):
    shared_value: FosterVisibility | None
    has_conflict: bool

    @property
    def listable(self) -> bool:
        return (
                not self.has_conflict
                and self.shared_value is not None
                and self.shared_value != FosterVisibility.NOT_VISIBLE
        )


def effective_visibility(animal: Animal, overrides: VisibilityOverrides | None = None) -> FosterVisibility:
    if overrides and (staged := overrides.get(animal.id)) is not None:
        return staged
    return animal.foster_visibility


def distinct_visibilities(
        animals: Iterable[Animal], overrides: VisibilityOverrides | None = None,
) -> set[FosterVisibility]:
    return {effective_visibility(animal, overrides) for animal in animals}


def group_visibility(members: list[Animal], overrides: VisibilityOverrides | None = None) -> GroupVisibility:
    if not members:
        return GroupVisibility(None, False)

    values = distinct_visibilities(members, overrides)
    if len(values) > 1:
        logger.warning(
            f"Group members have different foster visibility values: {sorted(values)} "
            f"(animals {[animal.id for animal in members]})"
        )
        return GroupVisibility(None, True)

    return GroupVisibility(values.pop(), False)


def would_conflict(animal: Animal, proposed: FosterVisibility, members: list[Animal]) -> bool:
    if proposed == animal.foster_visibility:
        return False

    others = distinct_visibilities(member for member in members if member.id != animal.id)
    if not others:
        return False
    if len(others) > 1:
        return True

    return proposed not in others


def resolve_members(group: AnimalGroup, animals_by_id: Mapping[int, Animal]) -> list[Animal]:
    return [
        animals_by_id[animal_id]
        for animal_id in group.animal_ids or []
        if animal_id in animals_by_id
    ]
