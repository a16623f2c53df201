from __future__ import annotations

from enum import Enum
from typing import Mapping, NamedTuple, TypeVar

from fostertrack.config import config
from fostertrack.listing.predicates import BaseFilters

TFilters = TypeVar("TFilters", bound=BaseFilters)

RESERVED_KEYS = ("search", "page", "pageSize")


class DecodedParams(NamedTuple):
    filters: BaseFilters
    search: str
    page: int
    page_size: int


def _encode_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _positive_int(value: str | None, default: int) -> int:
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def clamp_page_size(page_size: int | None) -> int:
    if not page_size or page_size < 1:
        return config.default_page_size
    return min(page_size, config.max_page_size)


def encode_params(
        filters: BaseFilters, search: str = "", page: int = 1, page_size: int | None = None,
) -> dict[str, str]:
    page_size = clamp_page_size(page_size)
    params = {}

    if search and search.strip():
        params["search"] = search.strip()

    for name, field in type(filters).model_fields.items():
        if (value := getattr(filters, name)) is None:
            continue
        params[field.alias or name] = _encode_value(value)

    if page > 1:
        params["page"] = str(page)
    if page_size != config.default_page_size:
        params["pageSize"] = str(page_size)

    return params


def decode_params(filters_cls: type[TFilters], params: Mapping[str, str]) -> DecodedParams:
    known = {field.alias or name for name, field in filters_cls.model_fields.items()}
    raw = {
        key: value
        for key, value in params.items()
        if key in known and key not in RESERVED_KEYS and value != ""
    }

    page_size = clamp_page_size(_positive_int(params.get("pageSize"), config.default_page_size))

    return DecodedParams(
        filters=filters_cls.model_validate(raw),
        search=(params.get("search") or "").strip(),
        page=_positive_int(params.get("page"), 1),
        page_size=page_size,
    )
