from typing import Literal

from pydantic import BaseModel

from fostertrack.models import FosterVisibility
from fostertrack.schemas.animals import AnimalInfo
from fostertrack.schemas.groups import GroupListingInfo


class NeededItemInfo(BaseModel):
    kind: Literal["animal", "group"]
    priority: bool
    created_at: int
    visibility: FosterVisibility
    animal: AnimalInfo | None = None
    group: GroupListingInfo | None = None
