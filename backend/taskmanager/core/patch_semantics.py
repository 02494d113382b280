"""PATCH Semantics — overlay a partial update onto the current state.

Invariants:
    - Only non-None patch values change anything; absent fields are never nulled
    - Returns NEW dicts; the current state mapping is not mutated
"""

from typing import Any, Mapping


def overlay_patch(
    current: Mapping[str, Any], patch: Mapping[str, Any],
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Return (effective, changes) where changes holds only fields that differ."""
    effective = dict(current)
    changes: dict[str, Any] = {}
    for key, value in patch.items():
        if value is None:
            continue
        if key not in effective:
            raise KeyError(f"unknown field in patch: {key}")
        if effective[key] != value:
            changes[key] = value
        effective[key] = value
    return effective, changes
