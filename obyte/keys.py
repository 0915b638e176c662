"""
Wallet-import-format (WIF) private keys.

Layout (Base58Check):
    version byte (0x80 mainnet, 0xEF testnet)
    32-byte secp256k1 private key
    optional 0x01 compression flag
    4-byte double-sha256 checksum (handled by base58)
"""

from __future__ import annotations

import base58

from obyte.errors import DecodeError

WIF_VERSION = 0x80
WIF_VERSION_TESTNET = 0xEF

PRIVATE_KEY_LENGTH = 32


def _wif_version(testnet: bool) -> int:
    return WIF_VERSION_TESTNET if testnet else WIF_VERSION


def from_wif(wif: str, testnet: bool = False) -> bytes:
    """Decode a WIF string into the raw 32-byte private key.

    Raises:
        DecodeError: On bad encoding, checksum, length, flag, or a
            version byte that does not match the selected network.
    """
    if not isinstance(wif, str) or not wif:
        raise DecodeError("wif must be a non-empty string")
    try:
        raw = base58.b58decode_check(wif)
    except ValueError as exc:
        raise DecodeError(f"invalid wif encoding: {exc}") from exc

    if len(raw) == PRIVATE_KEY_LENGTH + 2:
        if raw[-1] != 0x01:
            raise DecodeError("invalid compression flag")
    elif len(raw) != PRIVATE_KEY_LENGTH + 1:
        raise DecodeError(f"invalid wif length: {len(raw)} bytes")

    if raw[0] != _wif_version(testnet):
        raise DecodeError("invalid network version")
    return raw[1 : PRIVATE_KEY_LENGTH + 1]


def to_wif(private_key: bytes, testnet: bool = False, compressed: bool = True) -> str:
    """Encode a raw 32-byte private key as WIF."""
    if len(private_key) != PRIVATE_KEY_LENGTH:
        raise DecodeError(f"private key must be {PRIVATE_KEY_LENGTH} bytes")
    payload = bytes([_wif_version(testnet)]) + private_key
    if compressed:
        payload += b"\x01"
    return base58.b58encode_check(payload).decode("ascii")
