from fastapi import APIRouter, Request

from fostertrack.db.record_store import EntityKind
from fostertrack.dependencies import AnimalDep, OrganizationDep, PlannerDep, RecordStoreDep
from fostertrack.listing.predicates import AnimalFilters
from fostertrack.routes.utils import listing_request, page_json
from fostertrack.schemas.animals import AnimalInfo, CreateAnimalRequest, EditAnimalRequest, EditAnimalResponse
from fostertrack.schemas.common import PaginationResponse
from fostertrack.utils.group_membership import detach_animal
from fostertrack.utils.visibility_edit import EditState, VisibilityEditSession

router = APIRouter(prefix="/animals")


@router.get("", response_model=PaginationResponse[AnimalInfo])
async def get_animals(request: Request, organization_id: OrganizationDep, planner: PlannerDep):
    query = listing_request(AnimalFilters, request)
    page = await planner.list_animals(organization_id, query)

    return page_json(page, query, [await animal.to_json() for animal in page.items])


@router.post("", response_model=AnimalInfo)
async def create_animal(data: CreateAnimalRequest, organization_id: OrganizationDep, store: RecordStoreDep):
    animal = await store.create(EntityKind.ANIMAL, organization_id, data.model_dump())
    return await animal.to_json()


@router.get("/{animal_id}", response_model=AnimalInfo)
async def get_animal(animal: AnimalDep):
    return await animal.to_json()


@router.patch("/{animal_id}", response_model=EditAnimalResponse)
async def edit_animal(animal: AnimalDep, data: EditAnimalRequest, organization_id: OrganizationDep, store: RecordStoreDep):
    patch = data.model_dump(exclude_unset=True, exclude={"cascade"})

    session = VisibilityEditSession(store, organization_id, animal)
    outcome = await session.submit(patch)
    if session.state is EditState.AWAITING_DECISION:
        if data.cascade is True:
            outcome = await session.confirm()
        elif data.cascade is False:
            outcome = await session.cancel()

    return {
        "state": outcome.state,
        "applied": outcome.applied,
        "conflict": outcome.conflict,
        "proposed": outcome.proposed,
        "preview": outcome.preview._asdict() if outcome.preview is not None else None,
        "cascade": {
            "visibility": outcome.cascade.visibility,
            "updated": outcome.cascade.updated,
            "failed": outcome.cascade.failed,
            "failed_count": outcome.cascade.failed_count,
        } if outcome.cascade is not None else None,
        "animal": await outcome.animal.to_json(),
    }


@router.delete("/{animal_id}", status_code=204)
async def delete_animal(animal: AnimalDep, organization_id: OrganizationDep, store: RecordStoreDep):
    await detach_animal(store, organization_id, animal)
    await store.delete(EntityKind.ANIMAL, animal.id, organization_id)
