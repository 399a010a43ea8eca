"""Field-level change diff between two record snapshots.

Values are normalized to JSON-compatible form before comparison (dates to
ISO-8601, UUID to str, Enum to its value, Decimal and float to a JSON
number that is an int when integral, nested structures deep copied), then
compared by canonical JSON text. Nested mappings with the same content
compare equal regardless of key order, and 7, 7.0 and Decimal("7.00")
are the same value.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

FieldDiff = dict[str, dict[str, Any]]


def _number(value: float) -> int | float:
    if value.is_integer():
        return int(value)
    return value


def _parse_float(text: str) -> int | float:
    return _number(float(text))


def _json_default(value: Any) -> Any:
    """json.dumps fallback for the non-JSON types that appear in snapshots."""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return _number(float(value))
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def normalize_value(value: Any) -> Any:
    """Return a concrete JSON-compatible copy of value, or None if it cannot be normalized."""
    if value is None:
        return None
    try:
        return json.loads(
            json.dumps(value, default=_json_default, allow_nan=False),
            parse_float=_parse_float,
        )
    except (TypeError, ValueError, OverflowError, RecursionError):
        return None


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"))


def compute_diff(
    before: Mapping[str, Any] | None,
    after: Mapping[str, Any] | None,
    *,
    ignore: Iterable[str] = (),
) -> FieldDiff | None:
    """Return {field: {"from": old, "to": new}} for every field that differs, or None.

    An absent snapshot is treated as an empty mapping, so fields present on
    only one side are reported with None on the other. Fields named in
    ignore are never reported.

    Args:
        before: Snapshot before the write, or None.
        after: Snapshot after the write, or None.
        ignore: Field names to leave out (e.g. updated_at).

    Returns:
        Diff keyed by field name, or None when nothing differs.
    """
    before = before or {}
    after = after or {}
    skipped = set(ignore)
    diff: FieldDiff = {}
    for key in sorted(set(before) | set(after), key=str):
        if key in skipped:
            continue
        old = normalize_value(before.get(key))
        new = normalize_value(after.get(key))
        if _canonical(old) != _canonical(new):
            diff[key] = {"from": old, "to": new}
    return diff or None
