import pytest

from fostertrack.db.record_store import RecordStore, EntityKind
from fostertrack.models import Animal, FosterVisibility, AnimalStatus
from fostertrack.utils.custom_exception import ConnectivityError, CustomMessageException
from fostertrack.utils.group_visibility import group_visibility
from fostertrack.utils.visibility_edit import VisibilityEditSession, EditState
from tests.conftest import ORG_ID, create_animal, create_group


class FlakyStore(RecordStore):
    def __init__(self, failing_ids: set[int]) -> None:
        super().__init__()
        self.failing_ids = failing_ids

    async def update(self, kind, record_id, organization_id, patch):
        if kind is EntityKind.ANIMAL and record_id in self.failing_ids:
            raise ConnectivityError()
        return await super().update(kind, record_id, organization_id, patch)


async def _pair() -> tuple[Animal, Animal]:
    first = await create_animal(name="A")
    second = await create_animal(name="B")
    await create_group([first, second], name="Pair")
    return first, second


async def _visibilities(*animals: Animal) -> list[FosterVisibility]:
    return [(await Animal.get(id=animal.id)).foster_visibility for animal in animals]


@pytest.mark.asyncio
async def test_conflicting_change_waits_for_decision(db):
    first, second = await _pair()
    session = VisibilityEditSession(RecordStore(), ORG_ID, first)

    outcome = await session.submit({"foster_visibility": FosterVisibility.AVAILABLE_FUTURE})
    assert outcome.conflict
    assert not outcome.applied
    assert outcome.state is EditState.AWAITING_DECISION
    assert outcome.proposed == FosterVisibility.AVAILABLE_FUTURE
    assert outcome.preview.has_conflict
    assert await _visibilities(first, second) == [FosterVisibility.AVAILABLE_NOW] * 2

    with pytest.raises(RuntimeError):
        await session.submit({"name": "Other"})


@pytest.mark.asyncio
async def test_confirm_cascades_to_all_members(db):
    first, second = await _pair()
    session = VisibilityEditSession(RecordStore(), ORG_ID, first)

    await session.submit({"foster_visibility": FosterVisibility.AVAILABLE_FUTURE, "name": "Alpha"})
    outcome = await session.confirm()

    assert outcome.applied
    assert outcome.state is EditState.IDLE
    assert outcome.animal.name == "Alpha"
    assert outcome.cascade.updated == [second.id]
    assert outcome.cascade.failed == []
    assert await _visibilities(first, second) == [FosterVisibility.AVAILABLE_FUTURE] * 2

    members = await Animal.filter(id__in=[first.id, second.id])
    assert group_visibility(members).shared_value == FosterVisibility.AVAILABLE_FUTURE


@pytest.mark.asyncio
async def test_cancel_reverts_staged_visibility(db):
    first, second = await _pair()
    session = VisibilityEditSession(RecordStore(), ORG_ID, first)

    await session.submit({
        "foster_visibility": FosterVisibility.AVAILABLE_FUTURE, "status": AnimalStatus.MEDICAL_HOLD,
    })
    outcome = await session.cancel()

    assert outcome.applied
    assert outcome.state is EditState.IDLE
    assert await _visibilities(first, second) == [FosterVisibility.AVAILABLE_NOW] * 2
    assert (await Animal.get(id=first.id)).status == AnimalStatus.MEDICAL_HOLD

    with pytest.raises(RuntimeError):
        await session.confirm()


@pytest.mark.asyncio
async def test_cancel_without_other_fields_writes_nothing(db):
    first, _ = await _pair()
    session = VisibilityEditSession(RecordStore(), ORG_ID, first)

    await session.submit({"foster_visibility": FosterVisibility.FOSTER_PENDING})
    outcome = await session.cancel()

    assert not outcome.applied
    assert outcome.proposed == FosterVisibility.FOSTER_PENDING
    assert await _visibilities(first) == [FosterVisibility.AVAILABLE_NOW]


@pytest.mark.asyncio
async def test_cascade_partial_failure_is_reported(db):
    first, second = await _pair()
    third = await create_animal(name="C")
    group = await create_group([first, second, third], name="Trio")

    session = VisibilityEditSession(FlakyStore({third.id}), ORG_ID, first)
    assert (await session.submit({"foster_visibility": FosterVisibility.NOT_VISIBLE})).conflict

    outcome = await session.confirm()
    assert outcome.applied
    assert outcome.cascade.updated == [second.id]
    assert outcome.cascade.failed == [third.id]
    assert outcome.cascade.failed_count == 1
    assert await _visibilities(first, second, third) == [
        FosterVisibility.NOT_VISIBLE, FosterVisibility.NOT_VISIBLE, FosterVisibility.AVAILABLE_NOW,
    ]
    assert (await Animal.get(id=first.id)).group_id == group.id


@pytest.mark.asyncio
async def test_non_conflicting_changes_apply_directly(db):
    first, second = await _pair()
    single = await create_animal(name="Single")

    outcome = await VisibilityEditSession(RecordStore(), ORG_ID, single).submit(
        {"foster_visibility": FosterVisibility.NOT_VISIBLE},
    )
    assert outcome.applied
    assert not outcome.conflict
    assert await _visibilities(single) == [FosterVisibility.NOT_VISIBLE]

    outcome = await VisibilityEditSession(RecordStore(), ORG_ID, first).submit({"name": "Renamed"})
    assert outcome.applied
    assert outcome.animal.name == "Renamed"

    outcome = await VisibilityEditSession(RecordStore(), ORG_ID, first).submit(
        {"foster_visibility": FosterVisibility.AVAILABLE_NOW},
    )
    assert outcome.applied
    assert not outcome.conflict
    assert await _visibilities(first, second) == [FosterVisibility.AVAILABLE_NOW] * 2


@pytest.mark.asyncio
async def test_edit_of_deleted_animal_is_not_found(db):
    animal = await create_animal()
    session = VisibilityEditSession(RecordStore(), ORG_ID, animal)
    await animal.delete()

    with pytest.raises(CustomMessageException) as exc_info:
        await session.submit({"name": "Ghost"})
    assert exc_info.value.status_code == 404
