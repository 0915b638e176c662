"""
Protocol constants for unit composition.

Version strings select the hashing and commission rules (see
``VersionRules``). Testnet versions carry a ``t`` suffix and a
different ``alt`` tag so units can never be replayed across networks.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_NODE = "wss://obyte.org/bb"
DEFAULT_NODE_TESTNET = "wss://obyte.org/bb-test"

VERSION = "3.0"
VERSION_TESTNET = "3.0t"
ALT = "1"
ALT_TESTNET = "2"

# Placeholder authentifier. Must stay the length of a real base64
# compact signature (64 bytes -> 88 chars) or commissions will not
# match what validators compute.
SIGNATURE_LENGTH = 88
PLACEHOLDER_SIGNATURE = "-" * SIGNATURE_LENGTH

DEFAULT_SIGNING_PATH = "r"

# Extra base-currency amount requested when picking coins, reserved
# for commissions and returned through the change output.
FEE_RESERVE = 1000

# Picked inputs may come from any stable or own unconfirmed unit.
PICK_COINS_LAST_BALL_MCI = 1_000_000_000

PARENT_UNITS_SIZE = 2 * 44
PARENT_UNITS_KEY_SIZE = len("parent_units")

PAYMENT_APP = "payment"
INLINE = "inline"


@dataclass(frozen=True)
class VersionRules:
    """Hashing and sizing rules tied to a protocol version."""

    json_hashing: bool
    with_timestamp: bool
    with_key_sizes: bool


_RULES: dict[str, VersionRules] = {
    "1.0": VersionRules(json_hashing=False, with_timestamp=False, with_key_sizes=False),
    "2.0": VersionRules(json_hashing=True, with_timestamp=True, with_key_sizes=False),
    "3.0": VersionRules(json_hashing=True, with_timestamp=True, with_key_sizes=True),
}


def rules_for(version: str | None) -> VersionRules:
    """Look up the rules for a (possibly testnet-suffixed) version.

    ``None`` is treated as the genesis version, matching how units
    without a version field were hashed.

    Raises:
        ValueError: If the version is not known.
    """
    if version is None:
        return _RULES["1.0"]
    base = version[:-1] if version.endswith("t") else version
    try:
        return _RULES[base]
    except KeyError:
        raise ValueError(f"unsupported protocol version: {version!r}") from None


def network_tags(testnet: bool, version: str | None = None) -> tuple[str, str]:
    """Return ``(version, alt)`` for the selected network."""
    if version is None:
        version = VERSION_TESTNET if testnet else VERSION
    rules_for(version)
    return version, ALT_TESTNET if testnet else ALT
