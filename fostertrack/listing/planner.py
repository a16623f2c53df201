from __future__ import annotations

from asyncio import gather
from typing import Any

from loguru import logger

from fostertrack.db.query import QueryPredicate
from fostertrack.db.record_store import EntityKind, RecordStore
from fostertrack.listing.merge import merge_needed
from fostertrack.listing.pages import GroupListing, ListingPage, ListingPath, ListingRequest, paginate
from fostertrack.listing.predicates import AnimalFilters, BaseFilters, FostersNeededFilters, GroupFilters
from fostertrack.listing.rules import (
    ANIMAL_RULES, GROUP_RULES, Rules, translate_to_memory_predicate, translate_to_query, unexpressible_fields,
)
from fostertrack.models import Animal, AnimalGroup
from fostertrack.utils.group_visibility import group_visibility, resolve_members


class HybridQueryPlanner:
    """
    Chooses per request between a paginated server-side query and a full fetch
    filtered, sorted and paginated in memory.

    On the server path the page and the total count come from two independent queries that run
    concurrently and are not wrapped in a transaction, so a concurrent write may make the count
    differ slightly from the rows actually returned. Both paths sort by `created_at` and then `id`,
    which makes them return the same ids in the same order for any server-expressible predicate.
    """

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    @staticmethod
    def choose_path(filters: BaseFilters, rules: Rules, search: str = "") -> ListingPath:
        if unexpressible := unexpressible_fields(filters, rules, search):
            logger.debug(f"Using client path, fields not expressible on server: {unexpressible}")
            return ListingPath.CLIENT

        logger.debug("Using server path")
        return ListingPath.SERVER

    def _resolve_path(self, request: ListingRequest, rules: Rules, forced: ListingPath | None) -> ListingPath:
        path = self.choose_path(request.filters, rules, request.search)
        if forced is ListingPath.SERVER and path is ListingPath.CLIENT:
            unexpressible = unexpressible_fields(request.filters, rules, request.search)
            raise ValueError(f"Filters {unexpressible} cannot be evaluated on the server")
        return forced or path

    async def _server_page(
            self, kind: EntityKind, organization_id: int, request: ListingRequest, rules: Rules,
    ) -> tuple[list, int]:
        predicate = translate_to_query(request.filters, rules, organization_id, request.search)
        return await gather(
            self._store.fetch(
                kind, organization_id, predicate, request.filters.sort(),
                limit=request.page_size, offset=request.offset,
            ),
            self._store.count(kind, organization_id, predicate),
        )

    @staticmethod
    def _client_page(records: list, request: ListingRequest, rules: Rules) -> tuple[list, int]:
        predicate = translate_to_memory_predicate(request.filters, rules, request.search)
        matched = request.filters.sort().apply([record for record in records if predicate(record)])
        return paginate(matched, request.page, request.page_size), len(matched)

    async def list_animals(
            self, organization_id: int, request: ListingRequest[AnimalFilters], path: ListingPath | None = None,
    ) -> ListingPage[Animal]:
        path = self._resolve_path(request, ANIMAL_RULES, path)

        if path is ListingPath.SERVER:
            items, total = await self._server_page(EntityKind.ANIMAL, organization_id, request, ANIMAL_RULES)
        else:
            animals = await self._store.fetch(EntityKind.ANIMAL, organization_id)
            items, total = self._client_page(animals, request, ANIMAL_RULES)

        return ListingPage(items, total, request.page, request.page_size, path)

    async def members_of(self, organization_id: int, groups: list[AnimalGroup]) -> dict[int, Animal]:
        member_ids = sorted({animal_id for group in groups for animal_id in group.animal_ids or []})
        if not member_ids:
            return {}

        animals = await self._store.fetch(EntityKind.ANIMAL, organization_id, QueryPredicate.ids(member_ids))
        return {animal.id: animal for animal in animals}

    async def group_listing(self, organization_id: int, group: AnimalGroup) -> GroupListing:
        return self.project_groups([group], await self.members_of(organization_id, [group]))[0]

    @staticmethod
    def project_groups(groups: list[AnimalGroup], animals_by_id: dict[int, Animal]) -> list[GroupListing]:
        result = []
        for group in groups:
            members = resolve_members(group, animals_by_id)
            result.append(GroupListing(group, members, group_visibility(members)))
        return result

    async def list_groups(
            self, organization_id: int, request: ListingRequest[GroupFilters], path: ListingPath | None = None,
    ) -> ListingPage[GroupListing]:
        path = self._resolve_path(request, GROUP_RULES, path)

        if path is ListingPath.SERVER:
            groups, total = await self._server_page(EntityKind.GROUP, organization_id, request, GROUP_RULES)
            items = self.project_groups(groups, await self.members_of(organization_id, groups))
        else:
            groups, animals = await gather(
                self._store.fetch(EntityKind.GROUP, organization_id),
                self._store.fetch(EntityKind.ANIMAL, organization_id),
            )
            projected = self.project_groups(groups, {animal.id: animal for animal in animals})
            items, total = self._client_page(projected, request, GROUP_RULES)

        return ListingPage(items, total, request.page, request.page_size, path)

    async def list_fosters_needed(
            self, organization_id: int, request: ListingRequest[FostersNeededFilters],
    ) -> ListingPage[Any]:
        # group visibility is always derived, so this view can only run on the client path
        animals, groups = await gather(
            self._store.fetch(EntityKind.ANIMAL, organization_id),
            self._store.fetch(EntityKind.GROUP, organization_id),
        )
        projected = self.project_groups(groups, {animal.id: animal for animal in animals})

        merged = merge_needed(animals, projected, request.filters, request.search)
        return ListingPage(
            paginate(merged, request.page, request.page_size), len(merged), request.page, request.page_size,
            ListingPath.CLIENT,
        )
