"""
Unit composition: from (app, payload, key) to a signed, hashed unit.

Order matters for hash compatibility:

    1. derive the signer address from ["sig", {pubkey}]
    2. resolve the paying address (explicit, or the signer's)
    3. build the base payment message (fee-paying change output first)
    4. build the asset payment or the custom app message
    5. fetch witnesses -> parents, definitions, and coins concurrently
    6. assemble the draft unit with placeholder authentifiers
    7. size headers and payload commissions on the draft
    8. deduct both commissions from the first output of the first message
    9. re-sort payment outputs and recompute their payload hashes
    10. compute the hash-to-sign
    11. sign; write the signature into every author
    12. compute the unit hash last

Input problems surface as InputError before any network call.
Composition is all-or-nothing: a failure anywhere returns no unit.
"""

from __future__ import annotations

import asyncio
import copy
import logging
import time
from typing import Any, Awaitable, Callable

import jsonschema

from obyte.chash import derive_address, is_valid_address
from obyte.constants import (
    DEFAULT_SIGNING_PATH,
    FEE_RESERVE,
    INLINE,
    PAYMENT_APP,
    PICK_COINS_LAST_BALL_MCI,
    PLACEHOLDER_SIGNATURE,
    network_tags,
    rules_for,
)
from obyte.errors import InputError, InsufficientFundsError, ServerError
from obyte.fees import get_headers_size, get_total_payload_size
from obyte.hashing import payload_hash, unit_hash, unit_hash_to_sign
from obyte.signing import public_key_b64, sign

logger = logging.getLogger(__name__)

WitnessProvider = Callable[[], Awaitable[list[str]]]

PAYMENT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["outputs"],
    "properties": {
        "asset": {"type": ["string", "null"], "minLength": 44, "maxLength": 44},
        "outputs": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "required": ["address", "amount"],
                "properties": {
                    "address": {"type": "string", "pattern": "^[A-Z2-7]{32}$"},
                    "amount": {"type": "integer", "minimum": 1},
                },
                "additionalProperties": False,
            },
        },
    },
}


def sort_outputs(outputs: list[dict[str, Any]]) -> None:
    """Sort outputs in place: by address, ties by amount."""
    outputs.sort(key=lambda output: (output["address"], output["amount"]))


def validate_payment_payload(payload: Any) -> None:
    """Check a payment payload's shape and output addresses.

    Raises:
        InputError: If the payload is malformed.
    """
    try:
        jsonschema.validate(instance=payload, schema=PAYMENT_SCHEMA)
    except jsonschema.ValidationError as exc:
        raise InputError(f"invalid payment payload: {exc.message}") from exc
    for output in payload["outputs"]:
        if not is_valid_address(output["address"]):
            raise InputError(f"invalid output address: {output['address']!r}")


def _hash_payload(payload: Any, version: str) -> str:
    try:
        return payload_hash(payload, version)
    except ValueError as exc:
        raise InputError(f"payload cannot be hashed: {exc}") from exc


def _author(address: str, path: str, definition: Any, network_definition: Any) -> dict[str, Any]:
    author: dict[str, Any] = {
        "address": address,
        "authentifiers": {path: PLACEHOLDER_SIGNATURE},
    }
    if network_definition is None:
        author["definition"] = definition
    return author


class UnitComposer:
    """Builds signed units using hub data fetched through ``api``.

    Args:
        api: NetworkAPI (or anything with the same coroutine methods).
        witnesses: Coroutine function returning the session's cached
            witness list.
    """

    def __init__(self, api: Any, witnesses: WitnessProvider) -> None:
        self._api = api
        self._witnesses = witnesses

    async def compose(
        self,
        app: str,
        payload: Any,
        *,
        private_key: bytes,
        testnet: bool = False,
        version: str | None = None,
        definition: Any = None,
        address: str | None = None,
        path: str | None = None,
    ) -> dict[str, Any]:
        """Compose and sign a unit carrying ``payload`` under ``app``.

        Args:
            app: "payment" or a custom application name.
            payload: Payment payload ({asset?, outputs}) or app payload.
            private_key: Raw 32-byte signing key.
            testnet: Selects testnet version and alt tags.
            version: Protocol version override.
            definition: Explicit spending definition of the paying address.
            address: Explicit paying address; differs from the signer's
                address for multi-authored units.
            path: Signing path of the paying author (default "r").

        Returns:
            The finished unit dict, ``unit`` field set.

        Raises:
            InputError: Malformed app, payload, key, or options.
            InsufficientFundsError: Coins do not cover outputs and fees.
            TransportError, ServerError: Hub lookups failed.
        """
        if not isinstance(app, str) or not app:
            raise InputError("app must be a non-empty string")
        try:
            version, alt = network_tags(testnet, version)
        except ValueError as exc:
            raise InputError(str(exc)) from exc
        path = path or DEFAULT_SIGNING_PATH

        # 1-2. Authors
        signer_definition = ["sig", {"pubkey": public_key_b64(private_key)}]
        signer_address = derive_address(signer_definition)
        if definition is None:
            definition = signer_definition
        if address is None:
            try:
                address = derive_address(definition)
            except ValueError as exc:
                raise InputError(f"invalid definition: {exc}") from exc
        elif not is_valid_address(address):
            raise InputError(f"invalid address: {address!r}")
        multi_authored = address != signer_address

        # 3-4. Messages that need no hub data
        asset: str | None = None
        outputs: list[dict[str, Any]] = []
        custom_message: dict[str, Any] | None = None
        if app == PAYMENT_APP:
            validate_payment_payload(payload)
            asset = payload.get("asset")
            outputs = [dict(output) for output in payload["outputs"]]
        else:
            custom_payload = copy.deepcopy(payload)
            custom_message = {
                "app": app,
                "payload_hash": _hash_payload(custom_payload, version),
                "payload_location": INLINE,
                "payload": custom_payload,
            }

        logger.debug(
            "composing %s unit from %s (multi_authored=%s)", app, address, multi_authored
        )

        # 5. Hub lookups
        change_address = signer_address if multi_authored else address
        payment_requests = [
            self._payment_message(
                None, [] if asset or custom_message else outputs, address, change_address, version
            )
        ]
        if asset:
            payment_requests.append(
                self._payment_message(asset, outputs, address, address, version)
            )
        author_addresses = [address, signer_address] if multi_authored else [address]
        lookups = [
            asyncio.ensure_future(coro)
            for coro in (
                *payment_requests,
                self._light_props(),
                *(self._api.get_definition(a) for a in author_addresses),
            )
        ]
        try:
            results = await asyncio.gather(*lookups)
        except BaseException:
            # No hub request outlives a failed composition.
            for lookup in lookups:
                lookup.cancel()
            raise
        payment_messages: list[dict[str, Any]] = list(results[: len(payment_requests)])
        light_props: dict[str, Any] = results[len(payment_requests)]
        network_definitions = results[len(payment_requests) + 1 :]

        messages = list(payment_messages)
        if custom_message is not None:
            messages.append(custom_message)

        # 6. Draft unit
        unit: dict[str, Any] = {
            "version": version,
            "alt": alt,
            "messages": messages,
            "authors": [_author(address, path, definition, network_definitions[0])],
            "parent_units": light_props["parent_units"],
            "last_ball": light_props["last_stable_mc_ball"],
            "last_ball_unit": light_props["last_stable_mc_ball_unit"],
            "witness_list_unit": light_props["witness_list_unit"],
        }
        if rules_for(version).with_timestamp:
            unit["timestamp"] = round(time.time())
        if multi_authored:
            unit["authors"].append(
                _author(signer_address, DEFAULT_SIGNING_PATH, signer_definition, network_definitions[1])
            )
            unit["earned_headers_commission_recipients"] = [
                {"address": signer_address, "earned_headers_commission_share": 100}
            ]

        # 7. Commissions over the draft
        unit["headers_commission"] = get_headers_size(unit)
        unit["payload_commission"] = get_total_payload_size(unit)
        fee = unit["headers_commission"] + unit["payload_commission"]

        # 8. Fee comes out of the change output
        change = messages[0]["payload"]["outputs"][0]
        change["amount"] -= fee
        if change["amount"] <= 0:
            raise InsufficientFundsError(
                f"not enough funds on {address} to pay {fee} bytes of commissions"
            )

        # 9. Canonical output order and fresh payload hashes
        for message in payment_messages:
            sort_outputs(message["payload"]["outputs"])
            message["payload_hash"] = payload_hash(message["payload"], version)

        logger.debug(
            "commissions: headers=%d payload=%d",
            unit["headers_commission"],
            unit["payload_commission"],
        )

        # 10-12. Sign, then hash. No awaits from here on.
        signature = sign(unit_hash_to_sign(unit), private_key)
        unit["authors"][0]["authentifiers"] = {path: signature}
        if multi_authored:
            unit["authors"][1]["authentifiers"] = {DEFAULT_SIGNING_PATH: signature}
        unit["unit"] = unit_hash(unit)
        return unit

    async def _light_props(self) -> dict[str, Any]:
        witnesses = await self._witnesses()
        return await self._api.get_parents_and_last_ball_and_witness_list_unit(witnesses)

    async def _payment_message(
        self,
        asset: str | None,
        outputs: list[dict[str, Any]],
        paying_address: str,
        change_address: str,
        version: str,
    ) -> dict[str, Any]:
        """Payment message spending coins of ``paying_address``.

        The change output comes first. For the base currency it also
        carries the commission reserve, deducted later.
        """
        amount = sum(output["amount"] for output in outputs)
        target = amount if asset else amount + FEE_RESERVE
        params: dict[str, Any] = {
            "addresses": [paying_address],
            "last_ball_mci": PICK_COINS_LAST_BALL_MCI,
            "amount": target,
            "spend_unconfirmed": "own",
        }
        if asset:
            params["asset"] = asset
        try:
            coins = await self._api.pick_divisible_coins_for_amount(params)
        except ServerError as exc:
            raise InsufficientFundsError(
                f"cannot pick coins on {paying_address}: {exc.reason}"
            ) from exc
        if not coins["inputs_with_proofs"]:
            raise InsufficientFundsError(
                f"not enough funds on {paying_address} for {target}"
                + (f" of {asset}" if asset else "")
            )

        change_amount = coins["total_amount"] - amount
        payload: dict[str, Any] = {
            "inputs": [item["input"] for item in coins["inputs_with_proofs"]],
            "outputs": [],
        }
        # An exact asset spend has no change to return.
        if change_amount > 0 or not asset:
            payload["outputs"].append({"address": change_address, "amount": change_amount})
        payload["outputs"].extend(outputs)
        if asset:
            payload["asset"] = asset
        return {
            "app": PAYMENT_APP,
            "payload_hash": payload_hash(payload, version),
            "payload_location": INLINE,
            "payload": payload,
        }
