from typing import Annotated

from fastapi import Header, Depends

from fostertrack.db.record_store import RecordStore, EntityKind
from fostertrack.listing.planner import HybridQueryPlanner
from fostertrack.models import Animal, AnimalGroup
from fostertrack.utils.custom_exception import CustomMessageException

_store = RecordStore()


def record_store_dep() -> RecordStore:
    return _store


RecordStoreDep = Annotated[RecordStore, Depends(record_store_dep)]


def planner_dep(store: RecordStoreDep) -> HybridQueryPlanner:
    return HybridQueryPlanner(store)


PlannerDep = Annotated[HybridQueryPlanner, Depends(planner_dep)]


async def organization_dep(x_organization_id: str | None = Header(default=None)) -> int:
    if not x_organization_id or not x_organization_id.isdigit():
        raise CustomMessageException("Organization is required.", 401)

    return int(x_organization_id)


OrganizationDep = Annotated[int, Depends(organization_dep)]


async def animal_dep(animal_id: int, organization_id: OrganizationDep, store: RecordStoreDep) -> Animal:
    if (animal := await store.get(EntityKind.ANIMAL, animal_id, organization_id)) is None:
        raise CustomMessageException("Unknown animal.", 404)

    return animal


AnimalDep = Annotated[Animal, Depends(animal_dep)]


async def group_dep(group_id: int, organization_id: OrganizationDep, store: RecordStoreDep) -> AnimalGroup:
    if (group := await store.get(EntityKind.GROUP, group_id, organization_id)) is None:
        raise CustomMessageException("Unknown group.", 404)

    return group


GroupDep = Annotated[AnimalGroup, Depends(group_dep)]
