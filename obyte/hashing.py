"""
The unit hash chain: payload hash, hash-to-sign, and unit hash.

    payload_hash(payload)   -> base64 sha256 of one message payload
    unit_hash_to_sign(unit) -> raw sha256 of the unit without
                               authentifiers (the bytes that get signed)
    unit_hash(unit)         -> base64 sha256 of the stripped unit
                               (the unit's permanent id)

All three serialize with the same canonical rule for a given protocol
version: the source string for the genesis version, the JSON source
string afterwards.

The naked unit drops fields that validators re-derive (commissions,
main chain index) and message payloads, which are already covered by
their payload_hash.
"""

from __future__ import annotations

import base64
import copy
import hashlib
from typing import Any

from obyte.canonical_json import get_json_source_string, get_source_string
from obyte.constants import rules_for

_NON_HASHED_FIELDS = (
    "unit",
    "headers_commission",
    "payload_commission",
    "main_chain_index",
)


def sha256_digest(data: bytes) -> bytes:
    """Compute the raw SHA256 digest of bytes."""
    return hashlib.sha256(data).digest()


def _serialize(obj: Any, json_based: bool) -> bytes:
    source = get_json_source_string(obj) if json_based else get_source_string(obj)
    return source.encode("utf-8")


def get_base64_hash(obj: Any, json_based: bool = True) -> str:
    """Base64 SHA256 of an object's canonical serialization."""
    return base64.b64encode(sha256_digest(_serialize(obj, json_based))).decode("ascii")


def payload_hash(payload: Any, version: str | None) -> str:
    """Hash of a message payload under the rules of ``version``."""
    return get_base64_hash(payload, rules_for(version).json_hashing)


def get_naked_unit(unit: dict[str, Any]) -> dict[str, Any]:
    """Copy of the unit without re-derived fields and message payloads."""
    naked = copy.deepcopy(unit)
    for field_name in _NON_HASHED_FIELDS:
        naked.pop(field_name, None)
    if not rules_for(unit.get("version")).with_timestamp:
        naked.pop("timestamp", None)
    for message in naked.get("messages", []):
        message.pop("payload", None)
        message.pop("payload_uri", None)
    return naked


def unit_hash_to_sign(unit: dict[str, Any]) -> bytes:
    """The 32 bytes every author signs."""
    naked = get_naked_unit(unit)
    for author in naked["authors"]:
        author.pop("authentifiers", None)
    return sha256_digest(_serialize(naked, rules_for(unit.get("version")).json_hashing))


def unit_content_hash(unit: dict[str, Any]) -> str:
    """Base64 hash of the naked unit, authentifiers included."""
    return get_base64_hash(get_naked_unit(unit), rules_for(unit.get("version")).json_hashing)


def unit_hash(unit: dict[str, Any]) -> str:
    """The unit id: hash of the stripped unit.

    The stripped unit keeps only the content hash plus the fields needed
    to place the unit in the DAG, so the id survives later stripping of
    the unit's content.
    """
    stripped: dict[str, Any] = {
        "content_hash": unit_content_hash(unit),
        "version": unit["version"],
        "alt": unit["alt"],
        "authors": [{"address": author["address"]} for author in unit["authors"]],
    }
    if unit.get("witness_list_unit"):
        stripped["witness_list_unit"] = unit["witness_list_unit"]
    else:
        stripped["witnesses"] = unit["witnesses"]
    if unit.get("parent_units"):
        stripped["parent_units"] = unit["parent_units"]
        stripped["last_ball"] = unit["last_ball"]
        stripped["last_ball_unit"] = unit["last_ball_unit"]
    return get_base64_hash(stripped, rules_for(unit["version"]).json_hashing)
