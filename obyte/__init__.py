"""
Client-side unit composer and signer for the Obyte DAG ledger.

Public API:

    Client:
        - ``Client`` — compose / post / broadcast over one hub connection.
        - ``ClientOptions`` — client-wide defaults, loadable from env.

    Pure layer (no I/O):
        - ``derive_address``, ``is_valid_address`` — address derivation.
        - ``get_headers_size``, ``get_total_payload_size`` — commissions.
        - ``payload_hash``, ``unit_hash_to_sign``, ``unit_hash`` — hashes.
        - ``sign``, ``verify``, ``public_key_b64`` — secp256k1 signing.
        - ``from_wif``, ``to_wif`` — wallet-import-format keys.

    Network layer:
        - ``UnitComposer`` — the composition pipeline.
        - ``NetworkAPI`` — hub queries.
        - ``TransportClient``, ``WebSocketTransport`` — hub connection.

    Errors:
        - ``ObyteError`` and its subclasses.
"""

from obyte.api import API_COMMANDS, NetworkAPI
from obyte.apps import APPS, AppComposer
from obyte.chash import derive_address, get_chash160, is_valid_address, is_valid_chash
from obyte.client import Client
from obyte.composer import UnitComposer, sort_outputs
from obyte.config import ClientOptions
from obyte.errors import (
    DecodeError,
    InputError,
    InsufficientFundsError,
    ObyteError,
    ProtocolMismatchError,
    ServerError,
    TransportError,
)
from obyte.fees import get_headers_size, get_total_payload_size
from obyte.hashing import payload_hash, unit_hash, unit_hash_to_sign
from obyte.keys import from_wif, to_wif
from obyte.signing import public_key_b64, sign, verify
from obyte.transport import TransportClient, WebSocketTransport

__all__ = [
    "API_COMMANDS",
    "APPS",
    "AppComposer",
    "Client",
    "ClientOptions",
    "DecodeError",
    "InputError",
    "InsufficientFundsError",
    "NetworkAPI",
    "ObyteError",
    "ProtocolMismatchError",
    "ServerError",
    "TransportClient",
    "TransportError",
    "UnitComposer",
    "WebSocketTransport",
    "derive_address",
    "from_wif",
    "get_chash160",
    "get_headers_size",
    "get_total_payload_size",
    "is_valid_address",
    "is_valid_chash",
    "payload_hash",
    "public_key_b64",
    "sign",
    "sort_outputs",
    "to_wif",
    "unit_hash",
    "unit_hash_to_sign",
    "verify",
]
