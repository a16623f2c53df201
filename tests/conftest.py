from datetime import datetime, timedelta, UTC
from itertools import count
from os import environ
from typing import AsyncGenerator

import pytest_asyncio
from asgi_lifespan import LifespanManager
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from tortoise import Tortoise

environ["db_connection_string"] = "sqlite://:memory:"
environ["redis_connection_string"] = ""
environ["FOSTERTRACK_TESTING"] = "1"

from fostertrack.config import config
from fostertrack.main import app
from fostertrack.models import Animal, AnimalGroup, FosterVisibility
from fostertrack.utils.cache import Cache

ORG_ID = 1
OTHER_ORG_ID = 2
BASE_TIME = datetime(2025, 1, 1, tzinfo=UTC)

_ids = count(1)


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[None, None]:
    await Tortoise.init(db_url="sqlite://:memory:", modules={"models": ["fostertrack.models"]})
    await Tortoise.generate_schemas()
    Cache.configure(config.cache_config())
    await Cache.clear()

    yield

    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def app_with_lifespan() -> AsyncGenerator[FastAPI, None]:
    async with LifespanManager(app) as manager:
        yield manager.app


@pytest_asyncio.fixture
async def client(app_with_lifespan) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
            transport=ASGITransport(app=app_with_lifespan), base_url="https://fostertrack.local",
            headers={"x-organization-id": str(ORG_ID)},
    ) as client:
        yield client


def make_animal(
        animal_id: int | None = None, visibility: FosterVisibility = FosterVisibility.AVAILABLE_NOW,
        minutes: int = 0, **kwargs,
) -> Animal:
    kwargs.setdefault("organization_id", ORG_ID)
    kwargs.setdefault("created_at", BASE_TIME + timedelta(minutes=minutes))
    return Animal(id=animal_id or next(_ids), foster_visibility=visibility, **kwargs)


def make_group(group_id: int | None = None, animal_ids: list[int] | None = None, minutes: int = 0, **kwargs) -> AnimalGroup:
    kwargs.setdefault("organization_id", ORG_ID)
    kwargs.setdefault("created_at", BASE_TIME + timedelta(minutes=minutes))
    return AnimalGroup(id=group_id or next(_ids), animal_ids=list(animal_ids or []), **kwargs)


async def create_animal(minutes: int = 0, **kwargs) -> Animal:
    kwargs.setdefault("organization_id", ORG_ID)
    return await Animal.create(created_at=BASE_TIME + timedelta(minutes=minutes), **kwargs)


async def create_group(animals: list[Animal], minutes: int = 0, **kwargs) -> AnimalGroup:
    kwargs.setdefault("organization_id", ORG_ID)
    group = await AnimalGroup.create(
        animal_ids=[animal.id for animal in animals], created_at=BASE_TIME + timedelta(minutes=minutes), **kwargs,
    )
    for animal in animals:
        animal.group_id = group.id
        await animal.save(update_fields=["group_id"])

    return group
