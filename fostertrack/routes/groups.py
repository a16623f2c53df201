from fastapi import APIRouter, Request

from fostertrack.db.record_store import EntityKind
from fostertrack.dependencies import GroupDep, OrganizationDep, PlannerDep, RecordStoreDep
from fostertrack.listing.predicates import GroupFilters
from fostertrack.routes.utils import group_listing_json, listing_request, page_json
from fostertrack.schemas.common import PaginationResponse
from fostertrack.schemas.groups import GroupListingInfo, CreateGroupRequest, EditGroupRequest, MembershipChangeInfo, \
    MembershipMismatchInfo
from fostertrack.utils.group_membership import set_group_members, dissolve_group, membership_mismatches
from fostertrack.utils.custom_exception import CustomMessageException

router = APIRouter(prefix="/groups")


@router.get("", response_model=PaginationResponse[GroupListingInfo])
async def get_groups(request: Request, organization_id: OrganizationDep, planner: PlannerDep):
    query = listing_request(GroupFilters, request)
    page = await planner.list_groups(organization_id, query)

    return page_json(page, query, [await group_listing_json(listing) for listing in page.items])


@router.get("/membership-mismatches", response_model=list[MembershipMismatchInfo])
async def get_membership_mismatches(organization_id: OrganizationDep, store: RecordStoreDep):
    groups = await store.fetch(EntityKind.GROUP, organization_id)
    animals = await store.fetch(EntityKind.ANIMAL, organization_id)

    return [
        {"type": mismatch.type, "group_id": mismatch.group_id, "animal_id": mismatch.animal_id}
        for mismatch in membership_mismatches(groups, animals)
    ]


@router.post("", response_model=MembershipChangeInfo)
async def create_group(
        data: CreateGroupRequest, organization_id: OrganizationDep, store: RecordStoreDep, planner: PlannerDep,
):
    group = await store.create(EntityKind.GROUP, organization_id, data.model_dump(exclude={"animal_ids"}))
    try:
        change = await set_group_members(store, organization_id, group, data.animal_ids)
    except CustomMessageException:
        await store.delete(EntityKind.GROUP, group.id, organization_id)
        raise

    return {
        "group": await group_listing_json(await planner.group_listing(organization_id, change.group)),
        "added": change.added,
        "removed": change.removed,
        "failed": change.failed,
    }


@router.get("/{group_id}", response_model=GroupListingInfo)
async def get_group(group: GroupDep, organization_id: OrganizationDep, planner: PlannerDep):
    return await group_listing_json(await planner.group_listing(organization_id, group))


@router.patch("/{group_id}", response_model=MembershipChangeInfo)
async def edit_group(
        group: GroupDep, data: EditGroupRequest, organization_id: OrganizationDep, store: RecordStoreDep,
        planner: PlannerDep,
):
    patch = data.model_dump(exclude_unset=True, exclude={"animal_ids"})
    group = await store.update(EntityKind.GROUP, group.id, organization_id, patch) or group

    added, removed, failed = [], [], []
    if data.animal_ids is not None:
        change = await set_group_members(store, organization_id, group, data.animal_ids)
        group, added, removed, failed = change.group, change.added, change.removed, change.failed

    return {
        "group": await group_listing_json(await planner.group_listing(organization_id, group)),
        "added": added,
        "removed": removed,
        "failed": failed,
    }


@router.delete("/{group_id}", status_code=204)
async def delete_group(group: GroupDep, organization_id: OrganizationDep, store: RecordStoreDep):
    await dissolve_group(store, organization_id, group)
