"""
Tests for wallet-import-format keys.

Test plan:
- Known uncompressed mainnet vector decodes to the expected key
- Compressed keys round-trip on both networks
- Network mismatch, bad checksum, bad characters, bad flag, bad length,
  and empty input raise DecodeError (an InputError)
"""

import base58
import pytest

from obyte.errors import DecodeError, InputError
from obyte.keys import from_wif, to_wif

KNOWN_KEY = bytes.fromhex("0c28fca386c7a227600b2fe50b7cae11ec86d3bf1fbe471be89827e19d72aa1d")
KNOWN_WIF = "5HueCGU8rMjxEXxiPuD5BDku4MkFqeZyd4dZ1jvhTVqvbTLvyTJ"


class TestFromWif:
    def test_known_vector(self) -> None:
        assert from_wif(KNOWN_WIF) == KNOWN_KEY

    def test_compressed_mainnet(self) -> None:
        assert from_wif(to_wif(KNOWN_KEY)) == KNOWN_KEY

    def test_compressed_testnet(self) -> None:
        assert from_wif(to_wif(KNOWN_KEY, testnet=True), testnet=True) == KNOWN_KEY

    def test_uncompressed_encoding_matches_vector(self) -> None:
        assert to_wif(KNOWN_KEY, compressed=False) == KNOWN_WIF


class TestFromWifErrors:
    def test_network_mismatch(self) -> None:
        with pytest.raises(DecodeError, match="network"):
            from_wif(KNOWN_WIF, testnet=True)

    def test_bad_checksum(self) -> None:
        tampered = KNOWN_WIF[:-1] + ("K" if KNOWN_WIF[-1] != "K" else "L")
        with pytest.raises(DecodeError):
            from_wif(tampered)

    def test_bad_characters(self) -> None:
        with pytest.raises(DecodeError):
            from_wif("0OIl" * 10)

    def test_bad_compression_flag(self) -> None:
        wif = base58.b58encode_check(b"\x80" + KNOWN_KEY + b"\x02").decode()
        with pytest.raises(DecodeError, match="compression"):
            from_wif(wif)

    def test_bad_length(self) -> None:
        wif = base58.b58encode_check(b"\x80" + KNOWN_KEY[:20]).decode()
        with pytest.raises(DecodeError, match="length"):
            from_wif(wif)

    def test_empty(self) -> None:
        with pytest.raises(DecodeError):
            from_wif("")

    def test_is_input_error(self) -> None:
        with pytest.raises(InputError):
            from_wif("not a key")
