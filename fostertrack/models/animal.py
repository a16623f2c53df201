from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum

from tortoise import Model, fields

from fostertrack.config import config
from fostertrack.utils.cache import Cache


class AnimalStatus(StrEnum):
    IN_FOSTER = "in_foster"
    ADOPTED = "adopted"
    MEDICAL_HOLD = "medical_hold"
    IN_SHELTER = "in_shelter"
    TRANSFERRING = "transferring"


class SexSpayNeuterStatus(StrEnum):
    MALE = "male"
    FEMALE = "female"
    SPAYED_FEMALE = "spayed_female"
    NEUTERED_MALE = "neutered_male"


class LifeStage(StrEnum):
    KITTEN = "kitten"
    ADULT = "adult"
    SENIOR = "senior"
    UNKNOWN = "unknown"


class FosterVisibility(StrEnum):
    AVAILABLE_NOW = "available_now"
    AVAILABLE_FUTURE = "available_future"
    FOSTER_PENDING = "foster_pending"
    NOT_VISIBLE = "not_visible"


class Animal(Model):
    id: int = fields.BigIntField(pk=True)
    organization_id: int = fields.BigIntField(db_index=True)
    name: str | None = fields.CharField(max_length=128, null=True, default=None)
    status: AnimalStatus = fields.CharEnumField(AnimalStatus, default=AnimalStatus.IN_SHELTER)
    sex_spay_neuter_status: SexSpayNeuterStatus | None = fields.CharEnumField(
        SexSpayNeuterStatus, null=True, default=None,
    )
    life_stage: LifeStage = fields.CharEnumField(LifeStage, default=LifeStage.UNKNOWN)
    priority: bool = fields.BooleanField(default=False)
    foster_visibility: FosterVisibility = fields.CharEnumField(
        FosterVisibility, default=FosterVisibility.AVAILABLE_NOW,
    )
    # weak references, not foreign keys
    group_id: int | None = fields.BigIntField(null=True, default=None, db_index=True)
    current_foster_id: int | None = fields.BigIntField(null=True, default=None)
    created_at: datetime = fields.DatetimeField(auto_now_add=True)
    date_of_birth: date | None = fields.DateField(null=True, default=None)

    class Meta:
        table = "animals"

    @property
    def display_name(self) -> str:
        if self.name is None or not self.name.strip():
            return config.unnamed_animal_label
        return self.name.strip()

    @Cache.decorator()
    async def to_json(self) -> dict:
        return {
            "id": self.id,
            "organization_id": self.organization_id,
            "name": self.display_name,
            "status": self.status,
            "sex_spay_neuter_status": self.sex_spay_neuter_status,
            "life_stage": self.life_stage,
            "priority": self.priority,
            "foster_visibility": self.foster_visibility,
            "group_id": self.group_id,
            "current_foster_id": self.current_foster_id,
            "created_at": int(self.created_at.timestamp()),
            "date_of_birth": self.date_of_birth.isoformat() if self.date_of_birth is not None else None,
        }

    def cache_key(self) -> str:
        return f"animal-{self.id}"

    cache_ns = cache_key
