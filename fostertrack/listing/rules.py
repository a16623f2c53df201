from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Callable

from fostertrack.db.query import Clause, ClauseOp, QueryPredicate
from fostertrack.listing.predicates import BaseFilters


class Comparator(StrEnum):
    EQUALS = "equals"
    TRUE_ONLY = "true_only"
    PRESENCE = "presence"
    ANY_MEMBER = "any_member"


@dataclass(frozen=True)
class FieldRule:
    """
    Maps one filter field onto a record column.

    Both translators are driven by this table: server-expressible rules become clauses that are
    sent to the store verbatim and evaluated in memory through the same `Clause.matches`.
    """

    field: str
    column: str
    comparator: Comparator = Comparator.EQUALS
    server_expressible: bool = True

    def clause(self, value: Any) -> Clause | None:
        if value is None:
            return None
        if self.comparator is Comparator.EQUALS:
            return Clause(self.column, ClauseOp.EQ, value)
        if self.comparator is Comparator.TRUE_ONLY:
            return Clause(self.column, ClauseOp.EQ, True) if value is True else None
        if self.comparator is Comparator.PRESENCE:
            return Clause(self.column, ClauseOp.IS_NULL, not value)
        return None

    def matches(self, record: Any, value: Any) -> bool:
        if self.comparator is Comparator.ANY_MEMBER:
            return any(getattr(member, self.column) == value for member in record.members)

        clause = self.clause(value)
        return clause is None or clause.matches(record)


Rules = tuple[FieldRule, ...]

ANIMAL_RULES: Rules = (
    FieldRule("priority", "priority", Comparator.TRUE_ONLY),
    FieldRule("sex", "sex_spay_neuter_status"),
    FieldRule("life_stage", "life_stage"),
    FieldRule("in_group", "group_id", Comparator.PRESENCE),
    FieldRule("status", "status"),
    FieldRule("foster_visibility", "foster_visibility"),
)

# group visibility only exists as a projection over member animals
GROUP_RULES: Rules = (
    FieldRule("priority", "priority", Comparator.TRUE_ONLY),
    FieldRule("foster_visibility", "foster_visibility", server_expressible=False),
)

NEEDED_ANIMAL_RULES: Rules = (
    FieldRule("priority", "priority", Comparator.TRUE_ONLY),
    FieldRule("sex", "sex_spay_neuter_status"),
    FieldRule("life_stage", "life_stage"),
    FieldRule("status", "status"),
    FieldRule("availability", "foster_visibility"),
)

NEEDED_GROUP_RULES: Rules = (
    FieldRule("priority", "priority", Comparator.TRUE_ONLY),
    FieldRule("life_stage", "life_stage", Comparator.ANY_MEMBER, server_expressible=False),
    FieldRule("availability", "foster_visibility", server_expressible=False),
)

# no group-level answer exists for these, an active one removes groups from the result
SINGLE_ONLY_FIELDS: tuple[str, ...] = ("sex",)


def _active(filters: BaseFilters, rules: Rules) -> list[tuple[FieldRule, Any]]:
    return [
        (rule, value)
        for rule in rules
        if (value := getattr(filters, rule.field)) is not None
    ]


def search_clause(search: str | None) -> Clause | None:
    if search is None or not search.strip():
        return None
    return Clause("name", ClauseOp.ICONTAINS, search.strip())


def unexpressible_fields(filters: BaseFilters, rules: Rules, search: str | None = None) -> list[str]:
    fields = [rule.field for rule, _ in _active(filters, rules) if not rule.server_expressible]
    if (clause := search_clause(search)) is not None and not clause.server_expressible:
        fields.append("search")
    return fields


def translate_to_query(
        filters: BaseFilters, rules: Rules, organization_id: int, search: str | None = None,
) -> QueryPredicate:
    clauses = [Clause("organization_id", ClauseOp.EQ, organization_id)]
    for rule, value in _active(filters, rules):
        if rule.server_expressible and (clause := rule.clause(value)) is not None:
            clauses.append(clause)
    if (clause := search_clause(search)) is not None and clause.server_expressible:
        clauses.append(clause)

    return QueryPredicate(tuple(clauses))


def translate_to_memory_predicate(
        filters: BaseFilters, rules: Rules, search: str | None = None,
) -> Callable[[Any], bool]:
    active = _active(filters, rules)
    search_cl = search_clause(search)

    def predicate(record: Any) -> bool:
        if search_cl is not None and not search_cl.matches(record):
            return False
        return all(rule.matches(record, value) for rule, value in active)

    return predicate
