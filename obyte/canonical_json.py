"""
Canonical serializations for deterministic hashing.

Two encodings are used by the ledger:

    - The *source string* (genesis protocol version): every scalar is
      tagged with its type ("s", "n", "b"), arrays are bracketed, object
      keys are sorted, and all components are joined with NUL.
    - The *JSON source string* (later versions): sorted keys, no
      whitespace, UTF-8 (no ASCII escapes for non-ASCII chars).

Both reject null values, empty arrays, and empty objects, since the
network refuses to hash them. Numbers are rendered the way the network
renders them, so integral floats drop their fractional part.

``canonical_json`` is the general-purpose serializer used for wire
frames; it applies the same key ordering without the rejections.
"""

import json
import math
from typing import Any

STRING_JOIN_CHAR = "\x00"


def canonical_json(obj: Any) -> str:
    """
    Serialize object to canonical JSON string.

    Rules:
    - Keys sorted alphabetically (recursive)
    - No whitespace
    - UTF-8 encoding (no ASCII escapes for non-ASCII chars)
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def canonical_json_bytes(obj: Any) -> bytes:
    """Serialize to canonical JSON as UTF-8 bytes."""
    return canonical_json(obj).encode("utf-8")


def _number_to_string(value: int | float) -> str:
    if isinstance(value, int):
        return str(value)
    if not math.isfinite(value):
        raise ValueError(f"non-finite number: {value!r}")
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(value)
    mantissa, sep, exponent = text.partition("e")
    if sep:
        return f"{mantissa}e{int(exponent):+d}"
    return text


def get_source_string(obj: Any) -> str:
    """Serialize to the NUL-joined, type-tagged source string.

    Raises:
        ValueError: On null values, empty containers, or unsupported types.
    """
    components: list[str] = []

    def extract(value: Any) -> None:
        if value is None:
            raise ValueError(f"null value in {obj!r}")
        if isinstance(value, str):
            components.extend(("s", value))
        elif isinstance(value, bool):
            components.extend(("b", "true" if value else "false"))
        elif isinstance(value, (int, float)):
            components.extend(("n", _number_to_string(value)))
        elif isinstance(value, (list, tuple)):
            if not value:
                raise ValueError(f"empty array in {obj!r}")
            components.append("[")
            for element in value:
                extract(element)
            components.append("]")
        elif isinstance(value, dict):
            if not value:
                raise ValueError(f"empty object in {obj!r}")
            for key in sorted(value):
                components.append(key)
                extract(value[key])
        else:
            raise ValueError(f"unknown type {type(value).__name__} in {obj!r}")

    extract(obj)
    return STRING_JOIN_CHAR.join(components)


def get_json_source_string(obj: Any) -> str:
    """Serialize to sorted-key, whitespace-free JSON.

    Raises:
        ValueError: On null values, empty containers, or unsupported types.
    """

    def stringify(value: Any) -> str:
        if value is None:
            raise ValueError(f"null value in {obj!r}")
        if isinstance(value, str):
            return json.dumps(value, ensure_ascii=False)
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return _number_to_string(value)
        if isinstance(value, (list, tuple)):
            if not value:
                raise ValueError(f"empty array in {obj!r}")
            return "[" + ",".join(stringify(element) for element in value) + "]"
        if isinstance(value, dict):
            if not value:
                raise ValueError(f"empty object in {obj!r}")
            return "{" + ",".join(
                f"{json.dumps(key, ensure_ascii=False)}:{stringify(value[key])}"
                for key in sorted(value)
            ) + "}"
        raise ValueError(f"unknown type {type(value).__name__} in {obj!r}")

    return stringify(obj)
