"""
Tests for chash160 and address derivation.

Test plan:
- chash160 known vectors: RIPEMD-160 digest carried in the clean bits,
  checksum bytes taken from its sha256
- Derivation: deterministic, 32 upper-case base32 chars, checksum valid
- Different definitions give different addresses
- Known mainnet address validates
- Validation rejects: changed character, lower case, wrong length,
  non-base32 characters, non-strings
"""

import base64
import hashlib

from obyte.chash import (
    _from_bits,
    _ripemd160,
    _separate_checksum,
    _to_bits,
    derive_address,
    get_chash160,
    is_valid_address,
    is_valid_chash,
)
from obyte.signing import public_key_b64

KEY_A = bytes.fromhex("0c28fca386c7a227600b2fe50b7cae11ec86d3bf1fbe471be89827e19d72aa1d")
KEY_B = bytes.fromhex("11" * 32)

KNOWN_ADDRESS = "BVVJ2K7ENPZZ3VYZFWQWK7ISPCATFIW3"


def _definition(key: bytes) -> list[object]:
    return ["sig", {"pubkey": public_key_b64(key)}]


class TestChash160:
    def test_ripemd160_vectors(self) -> None:
        assert _ripemd160(b"").hex() == "9c1185a5c5e9fc54612808977ee8f548b2258d31"
        assert _ripemd160(b"abc").hex() == "8eb208f7e05d987a9b044a8e98c6b087f15a0bfc"
        assert _ripemd160(b"message digest").hex() == "5d0689ef49d2fae572b881b123a85ffa21595f36"

    def test_clean_bits_are_truncated_ripemd160(self) -> None:
        encoded = get_chash160("abc")
        clean_bits, checksum_bits = _separate_checksum(_to_bits(base64.b32decode(encoded)))
        clean = _from_bits(clean_bits)
        assert clean.hex() == "e05d987a9b044a8e98c6b087f15a0bfc"
        full = hashlib.sha256(clean).digest()
        assert _from_bits(checksum_bits) == bytes([full[5], full[13], full[21], full[29]])

    def test_length(self) -> None:
        assert len(get_chash160("abc")) == 32


class TestDeriveAddress:
    def test_deterministic(self) -> None:
        assert derive_address(_definition(KEY_A)) == derive_address(_definition(KEY_A))

    def test_shape(self) -> None:
        address = derive_address(_definition(KEY_A))
        assert len(address) == 32
        assert address == address.upper()
        base64.b32decode(address)

    def test_checksum_valid(self) -> None:
        assert is_valid_address(derive_address(_definition(KEY_A)))
        assert is_valid_address(derive_address(_definition(KEY_B)))

    def test_different_definitions_differ(self) -> None:
        assert derive_address(_definition(KEY_A)) != derive_address(_definition(KEY_B))

    def test_get_chash160_of_any_string_is_valid(self) -> None:
        assert is_valid_chash(get_chash160("hello"))


class TestIsValidAddress:
    def test_known_address(self) -> None:
        assert is_valid_address(KNOWN_ADDRESS)

    def test_changed_character(self) -> None:
        changed = ("C" if KNOWN_ADDRESS[0] != "C" else "D") + KNOWN_ADDRESS[1:]
        assert not is_valid_address(changed)

    def test_lower_case(self) -> None:
        assert not is_valid_address(KNOWN_ADDRESS.lower())

    def test_wrong_length(self) -> None:
        assert not is_valid_address(KNOWN_ADDRESS[:-1])
        assert not is_valid_address(KNOWN_ADDRESS + "A")

    def test_non_base32(self) -> None:
        assert not is_valid_address("0" * 32)
        assert not is_valid_address("1" + KNOWN_ADDRESS[1:])

    def test_non_string(self) -> None:
        assert not is_valid_address(None)
        assert not is_valid_address(12345)
