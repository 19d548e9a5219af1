"""Filter query language over connection records.

A query is a ``+``-separated list of terms. ``field:value`` terms are scoped
to one record field (values for the same field are OR'd, fields are AND'd);
other terms are global and must each match one of the searchable fields.
Matching is case-insensitive substring matching.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .models import ConnectionRecord

TERM_SEPARATOR = "+"
GLOBAL_FIELDS: tuple[str, ...] = ("domain", "source", "protocol", "destination")


@dataclass(frozen=True, slots=True)
class FilterQuery:
    fields: dict[str, tuple[str, ...]] = field(default_factory=dict)
    global_terms: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.fields and not self.global_terms

    def matches(self, record: ConnectionRecord) -> bool:
        for name, values in self.fields.items():
            value = record.field_value(name)
            if value is None:
                return False
            value = value.lower()
            if not any(v in value for v in values):
                return False

        for term in self.global_terms:
            if not any(term in (record.field_value(f) or "").lower() for f in GLOBAL_FIELDS):
                return False

        return True


def parse_query(query: str) -> FilterQuery:
    """Split a query string into field-scoped and global terms."""
    terms = [t.strip() for t in query.strip().lower().split(TERM_SEPARATOR)]
    scoped: dict[str, list[str]] = {}
    global_terms: list[str] = []

    for term in terms:
        if not term:
            continue
        colon = term.find(":")
        if colon > 0:
            scoped.setdefault(term[:colon], []).append(term[colon + 1 :])
        else:
            global_terms.append(term)

    return FilterQuery(
        fields={name: tuple(values) for name, values in scoped.items()},
        global_terms=tuple(global_terms),
    )


def filter_records(query: str | FilterQuery, records: Iterable[ConnectionRecord]) -> list[ConnectionRecord]:
    """Return the records matching ``query``, preserving order. Blank queries match all."""
    q = parse_query(query) if isinstance(query, str) else query
    if q.is_empty:
        return list(records)
    return [r for r in records if q.matches(r)]
