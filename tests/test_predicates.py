import pytest
from pydantic import ValidationError

from fostertrack.listing.predicates import AnimalFilters, GroupFilters, FostersNeededFilters, count_active
from fostertrack.models import AnimalStatus, SexSpayNeuterStatus, LifeStage, FosterVisibility


def test_priority_false_is_unset():
    assert AnimalFilters(priority=False) == AnimalFilters()
    assert AnimalFilters(priority=False).priority is None
    assert count_active(AnimalFilters(priority=False)) == 0
    assert count_active(AnimalFilters(priority=True)) == 1


def test_in_group_is_tri_state():
    assert AnimalFilters(inGroup=False).in_group is False
    assert AnimalFilters(in_group=True).in_group is True
    assert AnimalFilters().in_group is None

    assert count_active(AnimalFilters(in_group=False)) == 1
    assert count_active(AnimalFilters(in_group=True)) == 1
    assert count_active(AnimalFilters()) == 0


def test_count_active_animal_filters():
    filters = AnimalFilters(
        priority=True,
        sex=SexSpayNeuterStatus.FEMALE,
        life_stage=LifeStage.KITTEN,
        in_group=False,
        status=AnimalStatus.IN_FOSTER,
        foster_visibility=FosterVisibility.AVAILABLE_NOW,
        sortByCreatedAt="oldest",
    )
    assert count_active(filters) == 7


def test_sort_counts_only_when_not_default():
    assert count_active(AnimalFilters(sortByCreatedAt="newest")) == 0
    assert count_active(AnimalFilters(sortByCreatedAt="oldest")) == 1
    assert count_active(FostersNeededFilters(sortByCreatedAt="oldest")) == 0
    assert count_active(FostersNeededFilters(sortByCreatedAt="newest")) == 1


def test_default_sort_directions():
    assert AnimalFilters().sort().descending
    assert GroupFilters().sort().descending
    assert not FostersNeededFilters().sort().descending
    assert FostersNeededFilters(sortByCreatedAt="newest").sort().descending


def test_group_filters_count():
    assert count_active(GroupFilters(foster_visibility=FosterVisibility.FOSTER_PENDING, priority=True)) == 2


def test_needed_type_both_is_unset():
    assert FostersNeededFilters(type="both") == FostersNeededFilters()
    assert FostersNeededFilters(type="groups").kind == "groups"
    assert count_active(FostersNeededFilters(type="singles", sex=SexSpayNeuterStatus.MALE)) == 2


def test_needed_availability_rejects_not_visible():
    with pytest.raises(ValidationError):
        FostersNeededFilters(availability=FosterVisibility.NOT_VISIBLE)


def test_empty_strings_are_unset():
    assert AnimalFilters(sex="", status="") == AnimalFilters()


def test_invalid_enum_value():
    with pytest.raises(ValidationError):
        AnimalFilters(status="lost")
