from fastapi import Request
from pydantic import ValidationError

from fostertrack.listing.pages import GroupListing, ListingPage, ListingRequest, TFilters
from fostertrack.listing.predicates import count_active
from fostertrack.utils.custom_exception import CustomMessageException


def listing_request(filters_cls: type[TFilters], request: Request) -> ListingRequest[TFilters]:
    try:
        return ListingRequest.from_params(filters_cls, request.query_params)
    except ValidationError as e:
        raise CustomMessageException([
            f"[{'.'.join(str(loc) for loc in err['loc'])}] {err['msg']}"
            for err in e.errors()
        ], 422)


async def group_listing_json(listing: GroupListing) -> dict:
    return {
        **await listing.group.to_json(),
        "visibility": {
            "shared_value": listing.visibility.shared_value,
            "has_conflict": listing.visibility.has_conflict,
        },
        "members": [await member.to_json() for member in listing.members],
    }


def page_json(page: ListingPage, query: ListingRequest, result: list) -> dict:
    return {
        "count": page.total,
        "active_filters": count_active(query.filters),
        "page": page.page,
        "page_size": page.page_size,
        "total_pages": page.total_pages,
        "result": result,
    }
