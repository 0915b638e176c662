"""
Error taxonomy for composing and posting units.

Three families, matching where a failure originates:

    - InputError: the caller's data is wrong (bad payload, bad key,
      not enough funds). Raised before the unit leaves the process.
      Retrying with corrected input is safe.
    - TransportError: the hub could not be reached or answered with
      something unparseable. Surfaced verbatim; no retries here.
    - ServerError: the hub understood the request and refused it.
      ProtocolMismatchError is the refusal of a submitted unit and
      keeps the unit so the caller can inspect or resubmit it.
"""

from __future__ import annotations

from typing import Any


class ObyteError(Exception):
    """Base class for all errors raised by this package."""


class InputError(ObyteError, ValueError):
    """Malformed payload, options, or key material."""


class DecodeError(InputError):
    """A wallet-encoded private key could not be decoded."""


class InsufficientFundsError(InputError):
    """The paying address cannot cover the outputs plus commissions."""


class TransportError(ObyteError):
    """Connection lost, request timed out, or malformed hub response."""


class ServerError(ObyteError):
    """The hub answered a request with an error.

    Attributes:
        command: Hub command that failed (e.g. ``"post_joint"``).
        reason: Error value returned by the hub, usually a string.
    """

    def __init__(self, command: str, reason: Any) -> None:
        self.command = command
        self.reason = reason
        super().__init__(f"{command}: {reason}")


class ProtocolMismatchError(ServerError):
    """A submitted unit was rejected by the hub.

    Attributes:
        unit: The rejected unit dict, unchanged.
    """

    def __init__(self, command: str, reason: Any, unit: dict[str, Any]) -> None:
        super().__init__(command, reason)
        self.unit = unit
