from datetime import date

from pydantic import BaseModel, field_validator

from fostertrack.models import AnimalStatus, SexSpayNeuterStatus, LifeStage, FosterVisibility


class AnimalInfo(BaseModel):
    id: int
    organization_id: int
    name: str
    status: AnimalStatus
    sex_spay_neuter_status: SexSpayNeuterStatus | None
    life_stage: LifeStage
    priority: bool
    foster_visibility: FosterVisibility
    group_id: int | None
    current_foster_id: int | None
    created_at: int
    date_of_birth: date | None


class CreateAnimalRequest(BaseModel):
    name: str | None = None
    status: AnimalStatus = AnimalStatus.IN_SHELTER
    sex_spay_neuter_status: SexSpayNeuterStatus | None = None
    life_stage: LifeStage = LifeStage.UNKNOWN
    priority: bool = False
    foster_visibility: FosterVisibility = FosterVisibility.AVAILABLE_NOW
    current_foster_id: int | None = None
    date_of_birth: date | None = None


class EditAnimalRequest(BaseModel):
    name: str | None = None
    status: AnimalStatus | None = None
    sex_spay_neuter_status: SexSpayNeuterStatus | None = None
    life_stage: LifeStage | None = None
    priority: bool | None = None
    foster_visibility: FosterVisibility | None = None
    current_foster_id: int | None = None
    date_of_birth: date | None = None
    # decision for a visibility change that conflicts with the rest of the group
    cascade: bool | None = None

    @field_validator("status", "life_stage", "priority", "foster_visibility")
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class GroupVisibilityInfo(BaseModel):
    shared_value: FosterVisibility | None
    has_conflict: bool


class CascadeInfo(BaseModel):
    visibility: FosterVisibility
    updated: list[int]
    failed: list[int]
    failed_count: int


class EditAnimalResponse(BaseModel):
    state: str
    applied: bool
    conflict: bool
    proposed: FosterVisibility | None
    preview: GroupVisibilityInfo | None
    cascade: CascadeInfo | None
    animal: AnimalInfo
