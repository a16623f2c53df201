from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Callable, Iterator

from loguru import logger
from tortoise import Model
from tortoise.exceptions import DBConnectionError, IntegrityError, OperationalError

from fostertrack.db.query import QueryPredicate, Sort
from fostertrack.models import Animal, AnimalGroup
from fostertrack.utils.cache import Cache
from fostertrack.utils.custom_exception import ConnectivityError


class EntityKind(StrEnum):
    ANIMAL = "animals"
    GROUP = "animal_groups"

    @property
    def model(self) -> type[Model]:
        return _MODELS[self]


_MODELS: dict[EntityKind, type[Model]] = {
    EntityKind.ANIMAL: Animal,
    EntityKind.GROUP: AnimalGroup,
}


@dataclass
class BatchItemResult:
    id: int
    ok: bool
    error: str | None = None


class RecordStore:
    """
    Tenant-scoped access to animals and groups.

    Every call is scoped by `organization_id`. Connection-level failures surface as
    ConnectivityError so callers never mistake them for an empty result. `connectivity_probe`
    returns True while the caller is known to be offline; an empty fetch in that state is
    reported as a connectivity failure as well.
    """

    def __init__(self, connectivity_probe: Callable[[], bool] | None = None) -> None:
        self._connectivity_probe = connectivity_probe

    @contextmanager
    def _translate_errors(self, action: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError:
            raise
        except (DBConnectionError, OperationalError) as e:
            logger.opt(exception=e).warning(f"Record store failed to {action}")
            raise ConnectivityError() from e

    def _offline(self) -> bool:
        return self._connectivity_probe is not None and self._connectivity_probe()

    async def fetch(
            self, kind: EntityKind, organization_id: int, predicate: QueryPredicate | None = None,
            sort: Sort | None = None, limit: int | None = None, offset: int | None = None,
    ) -> list[Model]:
        query = kind.model.filter(organization_id=organization_id)
        if predicate:
            query = query.filter(predicate.to_q())
        if sort is not None:
            query = query.order_by(*sort.order_by())
        if limit is not None:
            query = query.limit(limit)
        if offset:
            query = query.offset(offset)

        with self._translate_errors(f"fetch {kind}"):
            records = await query

        if not records and self._offline():
            raise ConnectivityError()

        logger.debug(f"Fetched {len(records)} {kind} for organization {organization_id}")
        return records

    async def count(self, kind: EntityKind, organization_id: int, predicate: QueryPredicate | None = None) -> int:
        query = kind.model.filter(organization_id=organization_id)
        if predicate:
            query = query.filter(predicate.to_q())

        with self._translate_errors(f"count {kind}"):
            return await query.count()

    async def get(self, kind: EntityKind, record_id: int, organization_id: int) -> Model | None:
        with self._translate_errors(f"get {kind}"):
            return await kind.model.get_or_none(id=record_id, organization_id=organization_id)

    async def create(self, kind: EntityKind, organization_id: int, data: dict[str, Any]) -> Model:
        with self._translate_errors(f"create {kind}"):
            return await kind.model.create(organization_id=organization_id, **data)

    async def update(self, kind: EntityKind, record_id: int, organization_id: int, patch: dict[str, Any]) -> Model | None:
        if (record := await self.get(kind, record_id, organization_id)) is None:
            return None
        if not patch:
            return record

        record.update_from_dict(patch)
        with self._translate_errors(f"update {kind} {record_id}"):
            await record.save(update_fields=list(patch.keys()))
        await Cache.delete_obj(record)

        return record

    async def batch_update(
            self, kind: EntityKind, ids: list[int], organization_id: int, patch: dict[str, Any],
    ) -> list[BatchItemResult]:
        results = []
        for record_id in ids:
            try:
                record = await self.update(kind, record_id, organization_id, patch)
            except (ConnectivityError, IntegrityError) as e:
                logger.warning(f"Batch update of {kind} {record_id} failed: {e}")
                results.append(BatchItemResult(id=record_id, ok=False, error=str(e)))
                continue

            if record is None:
                logger.warning(f"Batch update of {kind} {record_id} failed: unknown record")
                results.append(BatchItemResult(id=record_id, ok=False, error="Unknown record."))
            else:
                results.append(BatchItemResult(id=record_id, ok=True))

        return results

    async def delete(self, kind: EntityKind, record_id: int, organization_id: int) -> bool:
        if (record := await self.get(kind, record_id, organization_id)) is None:
            return False

        with self._translate_errors(f"delete {kind} {record_id}"):
            await record.delete()
        await Cache.delete_obj(record)

        return True
