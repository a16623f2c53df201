from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from loguru import logger

from fostertrack.db.query import Clause, ClauseOp, QueryPredicate
from fostertrack.db.record_store import EntityKind, RecordStore
from fostertrack.models import Animal, AnimalGroup
from fostertrack.utils.custom_exception import CustomMessageException


class MismatchType(StrEnum):
    NOT_LISTED = "not_listed"
    CLAIMED_ELSEWHERE = "claimed_elsewhere"
    UNKNOWN_ANIMAL = "unknown_animal"


@dataclass(frozen=True)
class MembershipMismatch:
    type: MismatchType
    group_id: int
    animal_id: int


@dataclass
class MembershipChange:
    group: AnimalGroup
    added: list[int] = field(default_factory=list)
    removed: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)


def membership_mismatches(groups: list[AnimalGroup], animals: list[Animal]) -> list[MembershipMismatch]:
    animals_by_id = {animal.id: animal for animal in animals}
    groups_by_id = {group.id: group for group in groups}
    result = []

    for group in groups:
        for animal_id in group.animal_ids or []:
            if (animal := animals_by_id.get(animal_id)) is None:
                result.append(MembershipMismatch(MismatchType.UNKNOWN_ANIMAL, group.id, animal_id))
            elif animal.group_id != group.id:
                result.append(MembershipMismatch(MismatchType.CLAIMED_ELSEWHERE, group.id, animal_id))

    for animal in animals:
        if animal.group_id is None:
            continue
        group = groups_by_id.get(animal.group_id)
        if group is None or animal.id not in (group.animal_ids or []):
            result.append(MembershipMismatch(MismatchType.NOT_LISTED, animal.group_id, animal.id))

    for mismatch in result:
        logger.warning(f"Group membership mismatch: {mismatch}")

    return result


def _dedupe(ids: list[int]) -> list[int]:
    return list(dict.fromkeys(ids))


async def _drop_from_group(store: RecordStore, organization_id: int, group_id: int, animal_ids: set[int]) -> None:
    group = await store.get(EntityKind.GROUP, group_id, organization_id)
    if group is None:
        return

    remaining = [animal_id for animal_id in group.animal_ids or [] if animal_id not in animal_ids]
    if len(remaining) != len(group.animal_ids or []):
        await store.update(EntityKind.GROUP, group.id, organization_id, {"animal_ids": remaining})


async def set_group_members(
        store: RecordStore, organization_id: int, group: AnimalGroup, animal_ids: list[int],
) -> MembershipChange:
    new_ids = _dedupe(animal_ids)
    old_ids = list(group.animal_ids or [])

    animals = await store.fetch(EntityKind.ANIMAL, organization_id, QueryPredicate.ids(new_ids)) if new_ids else []
    if unknown := sorted(set(new_ids) - {animal.id for animal in animals}):
        raise CustomMessageException(f"Unknown animals: {unknown}.", 400)

    added = [animal_id for animal_id in new_ids if animal_id not in old_ids]
    removed = [animal_id for animal_id in old_ids if animal_id not in new_ids]

    # an animal belongs to at most one group
    moved: dict[int, set[int]] = {}
    for animal in animals:
        if animal.id in added and animal.group_id is not None and animal.group_id != group.id:
            moved.setdefault(animal.group_id, set()).add(animal.id)
    for previous_group_id, moved_ids in moved.items():
        await _drop_from_group(store, organization_id, previous_group_id, moved_ids)

    group = await store.update(EntityKind.GROUP, group.id, organization_id, {"animal_ids": new_ids}) or group

    results = await store.batch_update(EntityKind.ANIMAL, added, organization_id, {"group_id": group.id})
    # only animals still pointing at this group are unlinked
    claimed = await store.fetch(EntityKind.ANIMAL, organization_id, QueryPredicate.ids(removed)) if removed else []
    results += await store.batch_update(
        EntityKind.ANIMAL, [animal.id for animal in claimed if animal.group_id == group.id], organization_id,
        {"group_id": None},
    )

    change = MembershipChange(group, added, removed, [result.id for result in results if not result.ok])
    if change.failed:
        logger.warning(f"Group {group.id} membership partially applied, failed animals: {change.failed}")

    return change


async def detach_animal(store: RecordStore, organization_id: int, animal: Animal) -> None:
    if animal.group_id is not None:
        await _drop_from_group(store, organization_id, animal.group_id, {animal.id})


async def dissolve_group(store: RecordStore, organization_id: int, group: AnimalGroup) -> list[int]:
    claimed = await store.fetch(
        EntityKind.ANIMAL, organization_id, QueryPredicate((Clause("group_id", ClauseOp.EQ, group.id),)),
    )
    results = await store.batch_update(
        EntityKind.ANIMAL, [animal.id for animal in claimed], organization_id, {"group_id": None},
    )
    await store.delete(EntityKind.GROUP, group.id, organization_id)
    return [result.id for result in results if not result.ok]
