from pydantic import BaseModel, Field, field_validator

from fostertrack.schemas.animals import AnimalInfo, GroupVisibilityInfo


class GroupInfo(BaseModel):
    id: int
    organization_id: int
    name: str
    description: str | None
    animal_ids: list[int]
    priority: bool
    current_foster_id: int | None
    created_at: int


class GroupListingInfo(GroupInfo):
    visibility: GroupVisibilityInfo
    members: list[AnimalInfo]


class CreateGroupRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    priority: bool = False
    current_foster_id: int | None = None
    animal_ids: list[int] = Field(default_factory=list)


class EditGroupRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    priority: bool | None = None
    current_foster_id: int | None = None
    animal_ids: list[int] | None = None

    @field_validator("priority", "animal_ids")
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class MembershipChangeInfo(BaseModel):
    group: GroupListingInfo
    added: list[int]
    removed: list[int]
    failed: list[int]


class MembershipMismatchInfo(BaseModel):
    type: str
    group_id: int
    animal_id: int
