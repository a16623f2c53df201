import pytest
from httpx import AsyncClient

from fostertrack.models import Animal, AnimalGroup, FosterVisibility
from fostertrack.schemas.common import PaginationResponse
from fostertrack.schemas.groups import GroupListingInfo, MembershipChangeInfo, MembershipMismatchInfo
from tests.conftest import create_animal, create_group


class PaginationGroupResponse(PaginationResponse[GroupListingInfo]):
    pass


@pytest.mark.asyncio
async def test_get_groups(client: AsyncClient):
    for idx in range(12):
        members = [
            await create_animal(foster_visibility=FosterVisibility.AVAILABLE_NOW),
            await create_animal(
                foster_visibility=FosterVisibility.AVAILABLE_NOW if idx % 3 else FosterVisibility.NOT_VISIBLE,
            ),
        ]
        await create_group(members, minutes=idx, name=f"group{idx}", priority=idx % 4 == 0)

    response = await client.get("/groups?pageSize=5")
    assert response.status_code == 200, response.json()
    resp = PaginationGroupResponse(**response.json())
    assert resp.count == 12
    assert resp.active_filters == 0
    assert resp.total_pages == 3
    assert [group.name for group in resp.result] == [f"group{idx}" for idx in range(11, 6, -1)]
    assert all(len(group.members) == 2 for group in resp.result)

    response = await client.get("/groups?priority=true&sortByCreatedAt=oldest")
    assert response.status_code == 200, response.json()
    resp = PaginationGroupResponse(**response.json())
    assert [group.name for group in resp.result] == ["group0", "group4", "group8"]

    response = await client.get("/groups?foster_visibility=available_now")
    assert response.status_code == 200, response.json()
    resp = PaginationGroupResponse(**response.json())
    assert resp.count == 8
    assert all(group.visibility.shared_value == FosterVisibility.AVAILABLE_NOW for group in resp.result)
    assert all(not group.visibility.has_conflict for group in resp.result)

    response = await client.get("/groups?search=group1")
    assert response.status_code == 200, response.json()
    resp = PaginationGroupResponse(**response.json())
    assert {group.name for group in resp.result} == {"group1", "group10", "group11"}


@pytest.mark.asyncio
async def test_create_group(client: AsyncClient):
    first = await create_animal()
    second = await create_animal()

    response = await client.post("/groups", json={"animal_ids": [first.id, second.id]})
    assert response.status_code == 200, response.json()
    resp = MembershipChangeInfo(**response.json())
    assert resp.group.name == "Unnamed Group"
    assert resp.added == [first.id, second.id]
    assert [member.id for member in resp.group.members] == [first.id, second.id]
    assert resp.group.visibility.shared_value == FosterVisibility.AVAILABLE_NOW

    assert (await Animal.get(id=first.id)).group_id == resp.group.id

    response = await client.post("/groups", json={"animal_ids": [first.id, 123456]})
    assert response.status_code == 400, response.json()
    assert await AnimalGroup.filter(id__not=resp.group.id).count() == 0


@pytest.mark.asyncio
async def test_edit_group_members(client: AsyncClient):
    first = await create_animal()
    second = await create_animal()
    third = await create_animal()
    group = await create_group([first, second], name="before")

    response = await client.patch(f"/groups/{group.id}", json={"name": "after", "animal_ids": [second.id, third.id]})
    assert response.status_code == 200, response.json()
    resp = MembershipChangeInfo(**response.json())
    assert resp.group.name == "after"
    assert resp.added == [third.id]
    assert resp.removed == [first.id]
    assert resp.group.animal_ids == [second.id, third.id]

    assert (await Animal.get(id=first.id)).group_id is None
    assert (await Animal.get(id=third.id)).group_id == group.id

    response = await client.get(f"/groups/{group.id}")
    assert response.status_code == 200, response.json()
    assert GroupListingInfo(**response.json()).name == "after"


@pytest.mark.asyncio
async def test_membership_mismatches(client: AsyncClient):
    first = await create_animal()
    second = await create_animal()
    group = await create_group([first])
    second.group_id = group.id
    await second.save(update_fields=["group_id"])

    response = await client.get("/groups/membership-mismatches")
    assert response.status_code == 200, response.json()
    resp = [MembershipMismatchInfo(**item) for item in response.json()]
    assert [(item.type, item.group_id, item.animal_id) for item in resp] == [("not_listed", group.id, second.id)]


@pytest.mark.asyncio
async def test_delete_group(client: AsyncClient):
    first = await create_animal()
    group = await create_group([first])

    response = await client.delete(f"/groups/{group.id}")
    assert response.status_code == 204, response.json()

    assert await AnimalGroup.get_or_none(id=group.id) is None
    assert (await Animal.get(id=first.id)).group_id is None

    response = await client.get(f"/groups/{group.id}")
    assert response.status_code == 404, response.json()


@pytest.mark.asyncio
async def test_edit_group_null_values(client: AsyncClient):
    group = await create_group([await create_animal()], name="pair", description="two cats")

    for field in ("priority", "animal_ids"):
        response = await client.patch(f"/groups/{group.id}", json={field: None})
        assert response.status_code == 422, response.json()

    response = await client.patch(f"/groups/{group.id}", json={"name": None, "description": None})
    assert response.status_code == 200, response.json()
    resp = MembershipChangeInfo(**response.json())
    assert resp.group.name == "Unnamed Group"
    assert resp.group.description is None
