"""Field-level merge of researched values into existing facility rows."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def is_absent(value: Any) -> bool:
    """None, "" and numeric zero count as gaps. False is a real value."""
    if value is None or value == "":
        return True
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, float)) and value == 0


def merge_fields(
    existing: Mapping[str, Any],
    research: Mapping[str, Any],
    overwrite: bool = False,
    linked: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Build the update payload for one facility.

    Args:
        existing: Current column values of the facility.
        research: Researched column values; None values are never written.
        overwrite: Write every researched value instead of filling gaps only.
        linked: follower -> leader. A follower is written exactly when its
            leader is, regardless of the follower's current value.

    Returns:
        Payload of columns to write, followers after the others. Empty when
        there is nothing to fill.
    """
    linked = linked or {}
    payload: dict[str, Any] = {}

    for column, value in research.items():
        if value is None or column in linked:
            continue
        if overwrite or is_absent(existing.get(column)):
            payload[column] = value

    for follower, leader in linked.items():
        value = research.get(follower)
        if value is not None and leader in payload:
            payload[follower] = value

    return payload
