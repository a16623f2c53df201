from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from loguru import logger

from fostertrack.db.query import QueryPredicate
from fostertrack.db.record_store import EntityKind, RecordStore
from fostertrack.models import Animal, FosterVisibility
from fostertrack.utils.custom_exception import CustomMessageException
from fostertrack.utils.group_visibility import GroupVisibility, group_visibility, would_conflict


class EditState(StrEnum):
    IDLE = "idle"
    EVALUATING = "evaluating"
    AWAITING_DECISION = "awaiting_decision"
    CASCADE_APPLYING = "cascade_applying"


@dataclass
class CascadeResult:
    visibility: FosterVisibility
    updated: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return len(self.failed)


@dataclass
class EditOutcome:
    state: EditState
    animal: Animal
    applied: bool
    conflict: bool = False
    proposed: FosterVisibility | None = None
    preview: GroupVisibility | None = None
    cascade: CascadeResult | None = None


class VisibilityEditSession:
    """
    Per-edit conflict workflow for one animal.

    idle -> evaluating -> (idle | awaiting_decision) -> (cascade_applying | idle).
    A visibility change that would leave the animal's group in conflict is held back until the
    caller either confirms the cascade to every member or cancels, which reverts the staged value.
    No locks are taken, the last write wins.
    """

    def __init__(self, store: RecordStore, organization_id: int, animal: Animal) -> None:
        self._store = store
        self._organization_id = organization_id
        self.animal = animal
        self.state = EditState.IDLE
        self.members: list[Animal] = []
        self._patch: dict[str, Any] = {}

    async def _load_members(self) -> list[Animal]:
        group = await self._store.get(EntityKind.GROUP, self.animal.group_id, self._organization_id)
        if group is None or not group.animal_ids:
            return [self.animal]

        members = await self._store.fetch(
            EntityKind.ANIMAL, self._organization_id, QueryPredicate.ids(group.animal_ids),
        )
        if all(member.id != self.animal.id for member in members):
            members.append(self.animal)
        return members

    async def _apply(self, patch: dict[str, Any]) -> Animal:
        animal = await self._store.update(EntityKind.ANIMAL, self.animal.id, self._organization_id, patch)
        if animal is None:
            raise CustomMessageException("Unknown animal.", 404)

        self.animal = animal
        return animal

    @property
    def staged(self) -> FosterVisibility | None:
        return self._patch.get("foster_visibility")

    async def submit(self, patch: dict[str, Any]) -> EditOutcome:
        if self.state is not EditState.IDLE:
            raise RuntimeError(f"Cannot submit an edit while {self.state}")

        self.state = EditState.EVALUATING
        proposed = patch.get("foster_visibility")

        if proposed is not None and self.animal.group_id is not None:
            self.members = await self._load_members()
            if would_conflict(self.animal, proposed, self.members):
                self._patch = dict(patch)
                self.state = EditState.AWAITING_DECISION
                logger.info(
                    f"Visibility change of animal {self.animal.id} to {proposed} conflicts with "
                    f"group {self.animal.group_id}, waiting for decision"
                )
                return EditOutcome(
                    self.state, self.animal, applied=False, conflict=True, proposed=proposed,
                    preview=group_visibility(self.members, {self.animal.id: proposed}),
                )

        animal = await self._apply(patch)
        self.state = EditState.IDLE
        return EditOutcome(self.state, animal, applied=True, proposed=proposed)

    async def confirm(self) -> EditOutcome:
        if self.state is not EditState.AWAITING_DECISION:
            raise RuntimeError(f"Nothing to confirm while {self.state}")

        self.state = EditState.CASCADE_APPLYING
        visibility = self.staged
        animal = await self._apply(self._patch)

        others = [member.id for member in self.members if member.id != animal.id]
        results = await self._store.batch_update(
            EntityKind.ANIMAL, others, self._organization_id, {"foster_visibility": visibility},
        )
        cascade = CascadeResult(
            visibility,
            updated=[result.id for result in results if result.ok],
            failed=[result.id for result in results if not result.ok],
        )
        if cascade.failed:
            logger.warning(
                f"Cascade of {visibility} from animal {animal.id} failed for {cascade.failed_count} "
                f"member(s): {cascade.failed}"
            )

        self._patch = {}
        self.state = EditState.IDLE
        return EditOutcome(self.state, animal, applied=True, proposed=visibility, cascade=cascade)

    async def cancel(self) -> EditOutcome:
        if self.state is not EditState.AWAITING_DECISION:
            raise RuntimeError(f"Nothing to cancel while {self.state}")

        proposed = self.staged
        remaining = {key: value for key, value in self._patch.items() if key != "foster_visibility"}
        self._patch = {}

        animal = await self._apply(remaining)
        self.state = EditState.IDLE
        return EditOutcome(self.state, animal, applied=bool(remaining), proposed=proposed)
