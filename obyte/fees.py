"""
Commission sizing: headers and payload commissions of a unit.

A unit pays one byte of base currency per "byte" of its structure,
measured with a fixed rule rather than the wire encoding:

    - strings count their UTF-16 length
    - numbers count 8, booleans 1, nulls 0
    - containers count the sum of their children, plus the length of
      every key when the protocol version counts key sizes

Sizes must be computed on the draft unit with placeholder
authentifiers, exactly as validators do.
"""

from __future__ import annotations

import copy
from typing import Any

from obyte.constants import PARENT_UNITS_KEY_SIZE, PARENT_UNITS_SIZE, rules_for

# Header fields that never count toward the headers commission.
_NON_HEADER_FIELDS = (
    "unit",
    "headers_commission",
    "payload_commission",
    "main_chain_index",
    "messages",
    "parent_units",
)


def get_length(value: Any, with_keys: bool = False) -> int:
    """Measure a JSON-like value with the commission length rule."""
    if value is None:
        return 0
    if isinstance(value, str):
        return len(value.encode("utf-16-le")) // 2
    if isinstance(value, bool):
        return 1
    if isinstance(value, (int, float)):
        return 8
    if isinstance(value, (list, tuple)):
        return sum(get_length(element, with_keys) for element in value)
    if isinstance(value, dict):
        total = 0
        for key, element in value.items():
            if with_keys:
                total += len(key)
            total += get_length(element, with_keys)
        return total
    raise ValueError(f"unknown type {type(value).__name__}: {value!r}")


def _ensure_not_stripped(unit: dict[str, Any]) -> None:
    if "content_hash" in unit:
        raise ValueError("cannot size a stripped unit")


def get_headers_size(unit: dict[str, Any]) -> int:
    """Size of the unit header (authors, checkpoints, parents)."""
    _ensure_not_stripped(unit)
    rules = rules_for(unit.get("version"))
    header = copy.deepcopy(unit)
    for field_name in _NON_HEADER_FIELDS:
        header.pop(field_name, None)
    if not rules.with_timestamp:
        header.pop("timestamp", None)
    size = get_length(header, rules.with_key_sizes) + PARENT_UNITS_SIZE
    if rules.with_key_sizes:
        size += PARENT_UNITS_KEY_SIZE
    return size


def get_total_payload_size(unit: dict[str, Any]) -> int:
    """Size of all messages, payloads included."""
    _ensure_not_stripped(unit)
    rules = rules_for(unit.get("version"))
    return get_length(unit["messages"], rules.with_key_sizes)
