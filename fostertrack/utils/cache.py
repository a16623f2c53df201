from functools import wraps
from typing import TypeVar, Callable, Protocol

import aiocache
from loguru import logger

from fostertrack.config import config

Tdict = TypeVar("Tdict", bound=dict)


class Cacheable(Protocol):
    def cache_key(self) -> str:
        ...

    def cache_ns(self) -> str:
        ...


class CachedFunc(Protocol):
    async def __call__(self: Cacheable, *args, **kwargs) -> Tdict:
        ...


class Cache:
    _cache: aiocache.BaseCache | None = None

    @classmethod
    def _init_maybe(cls) -> None:
        if cls._cache is None:
            cls._cache = aiocache.caches.get("default")

    @classmethod
    def configure(cls, cache_config: dict) -> None:
        aiocache.caches.set_config({"default": cache_config})
        cls._cache = aiocache.caches.create("default")

    @classmethod
    async def clear(cls) -> None:
        cls._init_maybe()
        await cls._cache.clear()

    @classmethod
    async def set(cls, ns: str, key: str, obj: dict, ttl: int | None = None) -> None:
        cls._init_maybe()
        await cls._cache.set(key, obj, namespace=ns, ttl=ttl or config.cache_ttl)

    @classmethod
    async def get(cls, ns: str, key: str) -> dict | None:
        cls._init_maybe()
        return await cls._cache.get(key, namespace=ns)

    @classmethod
    async def delete_obj(cls, obj: Cacheable) -> None:
        cls._init_maybe()
        await cls._cache.clear(namespace=obj.cache_ns())
        logger.debug(f"Dropped cached entries for {obj.cache_ns()!r}")

    @classmethod
    def decorator(cls, ttl: int | None = None) -> Callable[[CachedFunc], CachedFunc]:
        def real_decorator(func: CachedFunc) -> CachedFunc:
            @wraps(func)
            async def wrapper(self: Cacheable, *args, **kwargs) -> Tdict:
                cache_ns = self.cache_ns()
                cache_key = self.cache_key()

                if (cached := await cls.get(cache_ns, cache_key)) is not None:
                    return cached

                result = await func(self, *args, **kwargs)
                await cls.set(cache_ns, cache_key, result, ttl)

                return result

            return wrapper

        return real_decorator
