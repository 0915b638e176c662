"""
Hub API — named light-client queries over a TransportClient.

Translates Python method calls into hub commands and checks the shape
of the responses the composer depends on. Uses an injectable transport
(TransportClient) so the websocket layer can be swapped for a fake
without changing parsing logic.

The registry below is the complete, static list of supported calls;
``NetworkAPI.call`` resolves a name through it, and the composition
path uses the typed methods.

No retry loops. No secrets. No ledger logic beyond response checking.
"""

from __future__ import annotations

from typing import Any

import jsonschema

from obyte.errors import InputError, TransportError
from obyte.transport import TransportClient

# Python name -> hub command.
API_COMMANDS: dict[str, str] = {
    "get_witnesses": "get_witnesses",
    "get_peers": "get_peers",
    "get_joint": "get_joint",
    "get_last_mci": "get_last_mci",
    "post_joint": "post_joint",
    "get_parents_and_last_ball_and_witness_list_unit": (
        "light/get_parents_and_last_ball_and_witness_list_unit"
    ),
    "get_definition": "light/get_definition",
    "pick_divisible_coins_for_amount": "light/pick_divisible_coins_for_amount",
    "get_history": "light/get_history",
    "get_balances": "light/get_balances",
    "get_attestation": "light/get_attestation",
    "get_attestations": "light/get_attestations",
    "get_profile_units": "light/get_profile_units",
    "get_data_feed": "light/get_data_feed",
    "dry_run_aa": "light/dry_run_aa",
    "get_aa_state_vars": "light/get_aa_state_vars",
    "get_aa_responses": "light/get_aa_responses",
    "get_aas_by_base_aas": "light/get_aas_by_base_aas",
    "get_aa_balances": "light/get_aa_balances",
    "get_bots": "hub/get_bots",
    "get_asset_metadata": "hub/get_asset_metadata",
}

_ADDRESS = {"type": "string", "pattern": "^[A-Z2-7]{32}$"}
_HASH = {"type": "string", "minLength": 44, "maxLength": 44}

WITNESSES_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": _ADDRESS,
    "minItems": 1,
}

PARENTS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": [
        "parent_units",
        "last_stable_mc_ball",
        "last_stable_mc_ball_unit",
        "witness_list_unit",
    ],
    "properties": {
        "parent_units": {"type": "array", "items": _HASH, "minItems": 1},
        "last_stable_mc_ball": _HASH,
        "last_stable_mc_ball_unit": _HASH,
        "witness_list_unit": _HASH,
    },
}

COINS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["inputs_with_proofs", "total_amount"],
    "properties": {
        "inputs_with_proofs": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["input"],
                "properties": {"input": {"type": "object"}},
            },
        },
        "total_amount": {"type": "integer", "minimum": 0},
    },
}


def _check_response(command: str, response: Any, schema: dict[str, Any]) -> None:
    """Raise TransportError if a hub response does not match ``schema``."""
    try:
        jsonschema.validate(instance=response, schema=schema)
    except jsonschema.ValidationError as exc:
        raise TransportError(f"{command}: malformed response: {exc.message}") from exc


class NetworkAPI:
    """Hub queries used by the composer, plus the generic registry.

    Args:
        transport: Connection used for every request.
    """

    def __init__(self, transport: TransportClient) -> None:
        self._transport = transport

    async def call(self, name: str, params: Any = None) -> Any:
        """Call any registered API by its Python name.

        Raises:
            InputError: If ``name`` is not in the registry.
        """
        try:
            command = API_COMMANDS[name]
        except KeyError:
            raise InputError(f"unknown API method: {name!r}") from None
        return await self._transport.request(command, params)

    # -----------------------------------------------------------------
    # Composition path
    # -----------------------------------------------------------------

    async def get_witnesses(self) -> list[str]:
        command = API_COMMANDS["get_witnesses"]
        response = await self._transport.request(command)
        _check_response(command, response, WITNESSES_SCHEMA)
        return list(response)

    async def get_parents_and_last_ball_and_witness_list_unit(
        self, witnesses: list[str]
    ) -> dict[str, Any]:
        """Parent units and last stable checkpoint for a witness list."""
        command = API_COMMANDS["get_parents_and_last_ball_and_witness_list_unit"]
        response = await self._transport.request(command, {"witnesses": witnesses})
        _check_response(command, response, PARENTS_SCHEMA)
        return dict(response)

    async def get_definition(self, address: str) -> Any:
        """Definition the hub has on record for ``address``, or None."""
        return await self._transport.request(API_COMMANDS["get_definition"], address)

    async def pick_divisible_coins_for_amount(self, params: dict[str, Any]) -> dict[str, Any]:
        """Inputs from ``params["addresses"]`` covering ``params["amount"]``.

        A hub that cannot cover the amount answers with an empty input
        list (or an error, raised by the transport as ServerError).
        """
        command = API_COMMANDS["pick_divisible_coins_for_amount"]
        response = await self._transport.request(command, params)
        _check_response(command, response, COINS_SCHEMA)
        return dict(response)

    async def post_joint(self, unit: dict[str, Any]) -> Any:
        """Submit a finished unit. A refusal raises ServerError."""
        return await self._transport.request(API_COMMANDS["post_joint"], {"unit": unit})
