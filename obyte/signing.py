"""
secp256k1 signing of unit hashes.

The network expects a 64-byte compact signature (r || s, big-endian,
low-S form) over the 32-byte hash-to-sign, base64-encoded to 88 chars.
Public keys travel as base64 of the 33-byte compressed point.

The hash is signed as-is (prehashed); it is never hashed again.
"""

from __future__ import annotations

import base64
import binascii

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    Prehashed,
    decode_dss_signature,
    encode_dss_signature,
)
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from obyte.errors import InputError

# Order of the secp256k1 group.
_CURVE_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

_HASH_LENGTH = 32
_ALGORITHM = ec.ECDSA(Prehashed(hashes.SHA256()))


def load_private_key(private_key: bytes) -> ec.EllipticCurvePrivateKey:
    """Build a secp256k1 key from raw 32 bytes.

    Raises:
        InputError: If the scalar is out of range.
    """
    if len(private_key) != 32:
        raise InputError("private key must be 32 bytes")
    try:
        return ec.derive_private_key(int.from_bytes(private_key, "big"), ec.SECP256K1())
    except ValueError as exc:
        raise InputError(f"invalid private key: {exc}") from exc


def public_key_b64(private_key: bytes) -> str:
    """Base64 of the compressed public key for a raw private key."""
    public_key = load_private_key(private_key).public_key()
    raw = public_key.public_bytes(Encoding.X962, PublicFormat.CompressedPoint)
    return base64.b64encode(raw).decode("ascii")


def _check_hash(message_hash: bytes) -> None:
    if len(message_hash) != _HASH_LENGTH:
        raise InputError(f"hash to sign must be {_HASH_LENGTH} bytes")


def sign(message_hash: bytes, private_key: bytes) -> str:
    """Sign a 32-byte hash; returns the base64 compact signature."""
    _check_hash(message_hash)
    der = load_private_key(private_key).sign(message_hash, _ALGORITHM)
    r, s = decode_dss_signature(der)
    if s > _CURVE_ORDER // 2:
        s = _CURVE_ORDER - s
    compact = r.to_bytes(32, "big") + s.to_bytes(32, "big")
    return base64.b64encode(compact).decode("ascii")


def verify(message_hash: bytes, signature: str, pubkey: str) -> bool:
    """Check a base64 compact signature against a base64 public key."""
    _check_hash(message_hash)
    try:
        compact = base64.b64decode(signature, validate=True)
        raw_pubkey = base64.b64decode(pubkey, validate=True)
    except (binascii.Error, ValueError):
        return False
    if len(compact) != 64:
        return False
    r = int.from_bytes(compact[:32], "big")
    s = int.from_bytes(compact[32:], "big")
    if s > _CURVE_ORDER // 2:
        return False
    try:
        public_key = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), raw_pubkey)
        public_key.verify(encode_dss_signature(r, s), message_hash, _ALGORITHM)
    except (InvalidSignature, ValueError):
        return False
    return True
