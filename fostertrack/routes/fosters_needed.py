from fastapi import APIRouter, Request

from fostertrack.dependencies import OrganizationDep, PlannerDep
from fostertrack.listing.merge import CandidateKind, NeededItem
from fostertrack.listing.predicates import FostersNeededFilters
from fostertrack.routes.utils import group_listing_json, listing_request, page_json
from fostertrack.schemas.common import PaginationResponse
from fostertrack.schemas.fosters_needed import NeededItemInfo

router = APIRouter(prefix="/fosters-needed")


async def _item_json(item: NeededItem) -> dict:
    result = {
        "kind": item.kind,
        "priority": item.priority,
        "created_at": int(item.created_at.timestamp()),
        "visibility": item.visibility,
    }
    if item.kind is CandidateKind.ANIMAL:
        result["animal"] = await item.record.to_json()
    else:
        result["group"] = await group_listing_json(item.record)

    return result


@router.get("", response_model=PaginationResponse[NeededItemInfo])
async def get_fosters_needed(request: Request, organization_id: OrganizationDep, planner: PlannerDep):
    query = listing_request(FostersNeededFilters, request)
    page = await planner.list_fosters_needed(organization_id, query)

    return page_json(page, query, [await _item_json(item) for item in page.items])
