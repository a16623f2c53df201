from __future__ import annotations

from datetime import datetime

from tortoise import Model, fields

from fostertrack.config import config
from fostertrack.utils.cache import Cache


class AnimalGroup(Model):
    id: int = fields.BigIntField(pk=True)
    organization_id: int = fields.BigIntField(db_index=True)
    name: str | None = fields.CharField(max_length=128, null=True, default=None)
    description: str | None = fields.TextField(null=True, default=None)
    # ordered, duplicate-free; the forward edge of the membership invariant
    animal_ids: list[int] = fields.JSONField(default=list)
    priority: bool = fields.BooleanField(default=False)
    current_foster_id: int | None = fields.BigIntField(null=True, default=None)
    created_at: datetime = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "animal_groups"

    @property
    def display_name(self) -> str:
        if self.name is None or not self.name.strip():
            return config.unnamed_group_label
        return self.name.strip()

    @Cache.decorator()
    async def to_json(self) -> dict:
        return {
            "id": self.id,
            "organization_id": self.organization_id,
            "name": self.display_name,
            "description": self.description,
            "animal_ids": list(self.animal_ids or []),
            "priority": self.priority,
            "current_foster_id": self.current_foster_id,
            "created_at": int(self.created_at.timestamp()),
        }

    def cache_key(self) -> str:
        return f"animal-group-{self.id}"

    cache_ns = cache_key
