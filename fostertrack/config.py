from pydantic import RedisDsn, field_validator
from pydantic_settings import BaseSettings


class _Config(BaseSettings):
    is_debug: bool = True
    root_path: str = ""
    db_connection_string: str = "sqlite://:memory:"
    migrations_dir: str = "data/migrations"

    # in-process cache when not set
    redis_connection_string: RedisDsn | None = None
    cache_ttl: int = 60 * 60

    default_page_size: int = 40
    max_page_size: int = 200

    unnamed_animal_label: str = "Unnamed Animal"
    unnamed_group_label: str = "Unnamed Group"

    @field_validator("redis_connection_string", mode="before")
    def set_redis_to_none_if_empty(cls, value: str | None) -> str | None:
        return value or None

    def cache_config(self) -> dict:
        if self.redis_connection_string is None:
            return {
                "cache": "aiocache.SimpleMemoryCache",
                "serializer": {"class": "aiocache.serializers.PickleSerializer"},
            }

        return {
            "cache": "aiocache.RedisCache",
            "endpoint": self.redis_connection_string.host,
            "port": self.redis_connection_string.port or 6379,
            "serializer": {"class": "aiocache.serializers.JsonSerializer"},
            "plugins": [],
        }


config = _Config()
