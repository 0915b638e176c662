"""
Client — the exposed surface for composing and posting units.

Wires a transport, the hub API, and the composer together and owns the
session's witness list cache:

    - ``compose(app, payload, **opts)`` -> signed unit dict
    - ``post(app, payload, **opts)``    -> unit id (compose + broadcast)
    - ``broadcast(unit)``               -> unit id
    - ``app(name).compose/post``        -> same, with the app tag fixed

The witness list is fetched on first use and kept for the lifetime of
the client. Concurrent first callers share one fetch; a failed fetch
leaves the cache empty.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from obyte.api import NetworkAPI
from obyte.apps import AppComposer, build_registry
from obyte.composer import UnitComposer
from obyte.config import ClientOptions
from obyte.errors import InputError, ProtocolMismatchError, ServerError
from obyte.keys import from_wif
from obyte.transport import Subscriber, TransportClient, WebSocketTransport

logger = logging.getLogger(__name__)


class Client:
    """Light client for one hub connection.

    Args:
        node_address: Hub websocket URL. Defaults to the configured or
            network default hub.
        options: Client-wide defaults (key, network, version, timeout).
        transport: Injectable transport. Defaults to WebSocketTransport.
    """

    def __init__(
        self,
        node_address: str | None = None,
        options: ClientOptions | None = None,
        *,
        transport: TransportClient | None = None,
    ) -> None:
        self.options = options or ClientOptions()
        self.transport: TransportClient = transport or WebSocketTransport(
            node_address or self.options.node_address,
            timeout=self.options.timeout,
        )
        self.api = NetworkAPI(self.transport)
        self._witnesses: list[str] | None = None
        self._witnesses_lock = asyncio.Lock()
        self._composer = UnitComposer(self.api, self.get_cached_witnesses)
        self.apps: dict[str, AppComposer] = build_registry(self.compose, self.post)

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def app(self, name: str) -> AppComposer:
        """Bound composer for a registered application.

        Raises:
            InputError: If ``name`` is not registered.
        """
        try:
            return self.apps[name]
        except KeyError:
            raise InputError(f"unknown application: {name!r}") from None

    # -----------------------------------------------------------------
    # Composition
    # -----------------------------------------------------------------

    async def compose(
        self,
        app: str,
        payload: Any,
        *,
        wif: str | None = None,
        definition: Any = None,
        address: str | None = None,
        path: str | None = None,
        testnet: bool | None = None,
    ) -> dict[str, Any]:
        """Compose and sign a unit; see ``UnitComposer.compose``.

        ``wif`` and ``testnet`` default to the client options. The key
        is decoded before any network call.
        """
        if testnet is None:
            testnet = self.options.testnet
        wif = wif or self.options.wif
        if not wif:
            raise InputError("no private key: pass wif= or set ClientOptions.wif")
        private_key = from_wif(wif, testnet)
        version = self.options.version if testnet == self.options.testnet else None
        return await self._composer.compose(
            app,
            payload,
            private_key=private_key,
            testnet=testnet,
            version=version,
            definition=definition,
            address=address,
            path=path,
        )

    async def post(self, app: str, payload: Any, **options: Any) -> str:
        """Compose a unit and broadcast it; returns the unit id."""
        unit = await self.compose(app, payload, **options)
        return await self.broadcast(unit)

    async def broadcast(self, unit: dict[str, Any]) -> str:
        """Submit a finished unit to the hub.

        Raises:
            ProtocolMismatchError: The hub rejected the unit. The unit
                is attached to the error unchanged.
            TransportError: The hub could not be reached.
        """
        try:
            await self.api.post_joint(unit)
        except ServerError as exc:
            raise ProtocolMismatchError(exc.command, exc.reason, unit) from exc
        logger.info("posted unit %s", unit["unit"])
        return unit["unit"]

    async def get_cached_witnesses(self) -> list[str]:
        """Session witness list, fetched at most once."""
        if self._witnesses is None:
            async with self._witnesses_lock:
                if self._witnesses is None:
                    self._witnesses = await self.api.get_witnesses()
        return list(self._witnesses)

    # -----------------------------------------------------------------
    # Transport passthrough
    # -----------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> None:
        self.transport.subscribe(callback)

    async def justsaying(self, subject: str, body: Any = None) -> None:
        await self.transport.justsaying(subject, body)

    async def close(self) -> None:
        await self.transport.close()
