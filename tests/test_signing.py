"""
Tests for secp256k1 signing.

Test plan:
- Public key: compressed, base64, matches the generator for key 1
- Signature: 88 base64 chars (64 bytes), low-S, verifies
- Verification fails for another key, another hash, tampered or
  malformed signatures
- Malformed keys and hashes raise InputError
"""

import base64
import hashlib

import pytest

from obyte.constants import SIGNATURE_LENGTH
from obyte.errors import InputError
from obyte.signing import public_key_b64, sign, verify

KEY_A = bytes.fromhex("0c28fca386c7a227600b2fe50b7cae11ec86d3bf1fbe471be89827e19d72aa1d")
KEY_B = bytes.fromhex("11" * 32)
HASH = hashlib.sha256(b"unit").digest()

_CURVE_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_GENERATOR_COMPRESSED = bytes.fromhex(
    "0279BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798"
)


class TestPublicKey:
    def test_generator_for_key_one(self) -> None:
        key_one = (1).to_bytes(32, "big")
        assert public_key_b64(key_one) == base64.b64encode(_GENERATOR_COMPRESSED).decode()

    def test_compressed_length(self) -> None:
        raw = base64.b64decode(public_key_b64(KEY_A))
        assert len(raw) == 33
        assert raw[0] in (2, 3)

    def test_zero_key_rejected(self) -> None:
        with pytest.raises(InputError):
            public_key_b64(bytes(32))

    def test_short_key_rejected(self) -> None:
        with pytest.raises(InputError):
            public_key_b64(b"\x01" * 31)


class TestSign:
    def test_length_matches_placeholder(self) -> None:
        signature = sign(HASH, KEY_A)
        assert len(signature) == SIGNATURE_LENGTH
        assert len(base64.b64decode(signature)) == 64

    def test_low_s(self) -> None:
        for _ in range(8):
            s = int.from_bytes(base64.b64decode(sign(HASH, KEY_A))[32:], "big")
            assert s <= _CURVE_ORDER // 2

    def test_verifies(self) -> None:
        assert verify(HASH, sign(HASH, KEY_A), public_key_b64(KEY_A))

    def test_wrong_hash_length(self) -> None:
        with pytest.raises(InputError):
            sign(b"short", KEY_A)


class TestVerify:
    def test_other_key(self) -> None:
        assert not verify(HASH, sign(HASH, KEY_A), public_key_b64(KEY_B))

    def test_other_hash(self) -> None:
        other = hashlib.sha256(b"other").digest()
        assert not verify(other, sign(HASH, KEY_A), public_key_b64(KEY_A))

    def test_tampered_signature(self) -> None:
        raw = bytearray(base64.b64decode(sign(HASH, KEY_A)))
        raw[10] ^= 0x01
        assert not verify(HASH, base64.b64encode(bytes(raw)).decode(), public_key_b64(KEY_A))

    def test_high_s_rejected(self) -> None:
        raw = base64.b64decode(sign(HASH, KEY_A))
        s = int.from_bytes(raw[32:], "big")
        high = raw[:32] + (_CURVE_ORDER - s).to_bytes(32, "big")
        assert not verify(HASH, base64.b64encode(high).decode(), public_key_b64(KEY_A))

    def test_malformed_signature(self) -> None:
        assert not verify(HASH, "not base64!", public_key_b64(KEY_A))
        assert not verify(HASH, base64.b64encode(b"x" * 10).decode(), public_key_b64(KEY_A))

    def test_malformed_pubkey(self) -> None:
        assert not verify(HASH, sign(HASH, KEY_A), base64.b64encode(b"\x02" * 5).decode())
