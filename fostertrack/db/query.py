from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from tortoise.expressions import Q


class ClauseOp(StrEnum):
    EQ = "eq"
    IS_NULL = "isnull"
    IN = "in"
    ICONTAINS = "icontains"


@dataclass(frozen=True)
class Clause:
    """
    One condition on a single record column.

    Every clause can be rendered both as a Tortoise filter and as an in-memory test,
    so a predicate built from clauses selects the same rows either way.
    """

    column: str
    op: ClauseOp
    value: Any

    @property
    def server_expressible(self) -> bool:
        # SQL UPPER/LOWER only fold ASCII case on SQLite
        return self.op is not ClauseOp.ICONTAINS or str(self.value).isascii()

    def to_filter(self) -> dict[str, Any]:
        if self.op is ClauseOp.EQ:
            return {self.column: self.value}
        return {f"{self.column}__{self.op.value}": self.value}

    def matches(self, record: object) -> bool:
        actual = getattr(record, self.column)
        if self.op is ClauseOp.EQ:
            return actual == self.value
        if self.op is ClauseOp.IS_NULL:
            return (actual is None) is bool(self.value)
        if self.op is ClauseOp.IN:
            return actual in self.value
        if self.op is ClauseOp.ICONTAINS:
            return str(self.value).lower() in (actual or "").lower()

        raise ValueError(f"Unsupported clause operator: {self.op!r}")


@dataclass(frozen=True)
class QueryPredicate:
    clauses: tuple[Clause, ...] = ()

    def __and__(self, other: QueryPredicate) -> QueryPredicate:
        return QueryPredicate(self.clauses + other.clauses)

    def __bool__(self) -> bool:
        return bool(self.clauses)

    def to_q(self) -> Q:
        return Q(*[Q(**clause.to_filter()) for clause in self.clauses], join_type=Q.AND)

    def matches(self, record: object) -> bool:
        return all(clause.matches(record) for clause in self.clauses)

    @classmethod
    def ids(cls, ids: list[int]) -> QueryPredicate:
        return cls((Clause("id", ClauseOp.IN, list(ids)),))


@dataclass(frozen=True)
class Sort:
    column: str = "created_at"
    descending: bool = True

    def order_by(self) -> list[str]:
        prefix = "-" if self.descending else ""
        return [f"{prefix}{self.column}", f"{prefix}id"]

    def key(self, record: object) -> tuple:
        return getattr(record, self.column), getattr(record, "id")

    def apply(self, records: list) -> list:
        return sorted(records, key=self.key, reverse=self.descending)
