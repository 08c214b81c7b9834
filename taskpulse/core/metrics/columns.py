"""Alias-based column lookup.

Column ids are assigned per board by monday.com and drift between boards, so
every logical field is resolved through a table of rules instead of a fixed
schema. To support a new alias, add a rule to the relevant entry.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from taskpulse.core.metrics.schemas import ColumnValue, Item


class MatchKind(str, enum.Enum):
    EXACT = "exact"
    CONTAINS = "contains"


@dataclass(frozen=True)
class ColumnRule:
    fragment: str
    kind: MatchKind = MatchKind.EXACT

    def matches(self, column_id: str) -> bool:
        if self.kind is MatchKind.EXACT:
            return column_id == self.fragment
        return self.fragment in column_id


def exact(column_id: str) -> ColumnRule:
    return ColumnRule(column_id, MatchKind.EXACT)


def contains(fragment: str) -> ColumnRule:
    return ColumnRule(fragment, MatchKind.CONTAINS)


class ColumnField(str, enum.Enum):
    WORKLOAD_PERSON = "workload_person"
    STATUS = "status"
    WORKLOAD_TIME = "workload_time"
    PAYMENT_PERSON = "payment_person"
    PAYMENT_TIME = "payment_time"
    PAYMENT_RATE = "payment_rate"


COLUMN_ALIASES: dict[ColumnField, tuple[ColumnRule, ...]] = {
    ColumnField.WORKLOAD_PERSON: (
        exact("person"),
        exact("people__1"),
        exact("people"),
        contains("people"),
    ),
    ColumnField.STATUS: (
        exact("status"),
        exact("status_1__1"),
        contains("status"),
    ),
    ColumnField.WORKLOAD_TIME: (
        exact("time_tracking__1"),
        exact("subitems_time_tracking__1"),
        exact("numbers"),
        contains("time"),
    ),
    ColumnField.PAYMENT_PERSON: (exact("person"),),
    ColumnField.PAYMENT_TIME: (exact("time_tracking__1"),),
    ColumnField.PAYMENT_RATE: (exact("numbers0__1"),),
}


def find_column(item: Item, field: ColumnField) -> ColumnValue | None:
    """Return the first column of ``item`` matched by any rule for ``field``.

    A column qualifies if it satisfies at least one rule; columns are
    scanned in the order the provider returned them.
    """
    rules = COLUMN_ALIASES[field]
    for column in item.column_values:
        if any(rule.matches(column.id) for rule in rules):
            return column
    return None


def column_text(item: Item, field: ColumnField) -> str:
    column = find_column(item, field)
    if column is None or column.text is None:
        return ""
    return column.text.strip()
