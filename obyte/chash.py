"""
Checksummed 160-bit hashes ("chash160") and address derivation.

An address is the chash160 of its definition's source string:

    ripemd160(source) -> drop first 4 bytes -> 128 clean bits
    checksum = sha256(clean)[5, 13, 21, 29] -> 32 bits
    mix checksum bits into the clean bits at offsets taken from pi
    base32 (RFC 4648) -> 32 upper-case chars

The mixing offsets make single-character typos detectable without
lengthening the address.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
from typing import Any

from Crypto.Hash import RIPEMD160

from obyte.canonical_json import get_source_string

CHASH160_LENGTH = 160
ADDRESS_LENGTH = 32

_PI = "14159265358979323846264338327950288419716939937510"


def _calc_offsets(chash_length: int) -> list[int]:
    offsets: list[int] = []
    offset = 0
    for digit in _PI:
        relative = int(digit)
        if relative == 0:
            continue
        offset += relative
        if offset >= chash_length:
            break
        offsets.append(offset)
    if len(offsets) != 32:
        raise ValueError("wrong number of checksum bits")
    return offsets


_OFFSETS_160 = _calc_offsets(CHASH160_LENGTH)


def _to_bits(data: bytes) -> str:
    return "".join(f"{byte:08b}" for byte in data)


def _from_bits(bits: str) -> bytes:
    return int(bits, 2).to_bytes(len(bits) // 8, "big")


def _checksum(clean_data: bytes) -> bytes:
    full = hashlib.sha256(clean_data).digest()
    return bytes((full[5], full[13], full[21], full[29]))


def _mix_checksum(clean_bits: str, checksum_bits: str) -> str:
    frags: list[str] = []
    start = 0
    for i, offset in enumerate(_OFFSETS_160):
        end = offset - i
        frags.append(clean_bits[start:end])
        frags.append(checksum_bits[i])
        start = end
    if start < len(clean_bits):
        frags.append(clean_bits[start:])
    return "".join(frags)


def _separate_checksum(bits: str) -> tuple[str, str]:
    frags: list[str] = []
    checksum_bits: list[str] = []
    start = 0
    for offset in _OFFSETS_160:
        frags.append(bits[start:offset])
        checksum_bits.append(bits[offset])
        start = offset + 1
    if start < len(bits):
        frags.append(bits[start:])
    return "".join(frags), "".join(checksum_bits)


def _ripemd160(data: bytes) -> bytes:
    return RIPEMD160.new(data).digest()


def get_chash160(data: str) -> str:
    """Compute the checksummed, base32-encoded 160-bit hash of a string."""
    truncated = _ripemd160(data.encode("utf-8"))[4:]
    mixed = _mix_checksum(_to_bits(truncated), _to_bits(_checksum(truncated)))
    return base64.b32encode(_from_bits(mixed)).decode("ascii")


def derive_address(definition: Any) -> str:
    """Derive the address of a definition (its chash160)."""
    return get_chash160(get_source_string(definition))


def is_valid_chash(encoded: Any, length: int = ADDRESS_LENGTH) -> bool:
    """Check the length and embedded checksum of a chash160 string."""
    if not isinstance(encoded, str) or len(encoded) != length:
        return False
    try:
        raw = base64.b32decode(encoded)
    except (binascii.Error, ValueError):
        return False
    clean_bits, checksum_bits = _separate_checksum(_to_bits(raw))
    return _from_bits(checksum_bits) == _checksum(_from_bits(clean_bits))


def is_valid_address(address: Any) -> bool:
    """Check that a string is a well-formed, checksummed address."""
    return (
        isinstance(address, str)
        and address == address.upper()
        and is_valid_chash(address, ADDRESS_LENGTH)
    )
