"""Small persisted UI preferences: sort state and dismissed release versions."""

from __future__ import annotations

from .config import DISMISSED_VERSIONS_KEY, SORT_KEY
from .models import SortColumn, SortDirection
from .sorting import SortSpec
from .storage import KeyValueStore


def load_sort_state(store: KeyValueStore) -> SortSpec:
    """Return the saved sort spec, or an unsorted spec if missing/corrupt."""
    data = store.get(SORT_KEY)
    if not isinstance(data, dict):
        return SortSpec()
    try:
        column = SortColumn(data["column"]) if data.get("column") else None
        direction = SortDirection(data.get("direction") or SortDirection.NONE.value)
    except ValueError:
        return SortSpec()
    return SortSpec(column=column, direction=direction)


def save_sort_state(store: KeyValueStore, spec: SortSpec) -> None:
    store.set(
        SORT_KEY,
        {
            "column": spec.column.value if spec.column is not None else None,
            "direction": spec.direction.value,
        },
    )


def dismissed_versions(store: KeyValueStore) -> list[str]:
    data = store.get(DISMISSED_VERSIONS_KEY, [])
    if not isinstance(data, list):
        return []
    return [str(v) for v in data]


def dismiss_version(store: KeyValueStore, version: str) -> list[str]:
    """Record a dismissed version once; return the updated list."""
    versions = dismissed_versions(store)
    if version not in versions:
        versions.append(version)
        store.set(DISMISSED_VERSIONS_KEY, versions)
    return versions
