"""
Client configuration.

Options come from keyword arguments or from the environment:

    OBYTE_WIF      default signing key (wallet import format)
    OBYTE_TESTNET  "1"/"true"/"yes" selects testnet
    OBYTE_VERSION  protocol version override (e.g. "2.0")
    OBYTE_NODE     hub websocket URL
    OBYTE_TIMEOUT  seconds to wait for hub responses (default 30)

Per-call keyword arguments to ``Client.compose`` override these.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

from obyte.constants import DEFAULT_NODE, DEFAULT_NODE_TESTNET
from obyte.errors import InputError

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ClientOptions:
    """Defaults applied to every composition on a client.

    The ``wif`` is excluded from repr so options can be logged.
    """

    wif: str | None = field(default=None, repr=False)
    testnet: bool = False
    version: str | None = None
    node: str | None = None
    timeout: float = 30.0

    @property
    def node_address(self) -> str:
        """Configured hub URL, or the default hub for the network."""
        if self.node:
            return self.node
        return DEFAULT_NODE_TESTNET if self.testnet else DEFAULT_NODE

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ClientOptions":
        """Build options from ``OBYTE_*`` environment variables.

        Raises:
            InputError: If OBYTE_TIMEOUT is not a positive number.
        """
        env = os.environ if environ is None else environ
        raw_timeout = env.get("OBYTE_TIMEOUT", "30")
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise InputError(f"OBYTE_TIMEOUT must be a number, got: {raw_timeout!r}") from None
        if timeout <= 0:
            raise InputError(f"OBYTE_TIMEOUT must be positive, got: {raw_timeout!r}")
        return cls(
            wif=env.get("OBYTE_WIF") or None,
            testnet=env.get("OBYTE_TESTNET", "").strip().lower() in _TRUE_VALUES,
            version=env.get("OBYTE_VERSION") or None,
            node=env.get("OBYTE_NODE") or None,
            timeout=timeout,
        )
