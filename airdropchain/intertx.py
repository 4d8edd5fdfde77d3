"""Interchain-account transaction messages, queries and the controller IBC callbacks."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable

from .errors import InvalidAddressError, InvalidRequestError, UnknownRequestError
from .types import acc_address_from_bech32

MODULE_NAME = "intertx"
STORE_KEY = MODULE_NAME
ROUTER_KEY = MODULE_NAME
QUERIER_ROUTE = MODULE_NAME

AMINO_NAME_REGISTER_ACCOUNT = "intertx/MsgRegisterAccount"
AMINO_NAME_SUBMIT_TX = "intertx/MsgSubmitTx"

CONTROLLER_PORT_PREFIX = "icacontroller-"
_ACK_ERROR_STRING = "error handling packet: see events for details"
_INTERNAL_ABCI_CODE = 1


@runtime_checkable
class SdkMsg(Protocol):
    """What a transaction message offers."""

    def validate_basic(self) -> None: ...

    def signers(self) -> list[bytes]: ...


def controller_port_id(owner: str) -> str:
    """The interchain-accounts controller port identifier of an owner."""
    if not owner.strip():
        raise InvalidAddressError("owner address cannot be empty")
    return CONTROLLER_PORT_PREFIX + owner


@dataclass
class MsgRegisterAccount:
    """Registers an interchain account for an owner over a connection."""

    owner: str
    connection_id: str

    def validate_basic(self) -> None:
        if not self.owner.strip():
            raise InvalidAddressError("missing sender address")
        try:
            acc_address_from_bech32(self.owner)
        except InvalidAddressError as exc:
            raise InvalidAddressError(f"failed to parse address: {self.owner}") from exc

    def signers(self) -> list[bytes]:
        return [acc_address_from_bech32(self.owner)]


@dataclass
class MsgSubmitTx:
    """Submits messages for execution by an owner's interchain account."""

    owner: str
    connection_id: str
    msgs: list[Any] = field(default_factory=list)

    def validate_basic(self) -> None:
        try:
            acc_address_from_bech32(self.owner)
        except InvalidAddressError as exc:
            raise InvalidAddressError("invalid owner address") from exc

    def signers(self) -> list[bytes]:
        return [acc_address_from_bech32(self.owner)]

    def tx_msgs(self) -> Optional[list[SdkMsg]]:
        """The carried messages, or None if any of them is not a message."""
        result = []
        for msg in self.msgs:
            if not isinstance(msg, SdkMsg):
                return None
            result.append(msg)
        return result


@dataclass
class QueryInterchainAccountRequest:
    connection_id: str
    owner: str


@dataclass
class QueryInterchainAccountResponse:
    interchain_account_address: str


def _check_acknowledgement(acknowledgement: bytes) -> None:
    data = json.loads(acknowledgement)
    if not isinstance(data, dict):
        raise ValueError("acknowledgement is not a JSON object")
    unknown = set(data) - {"result", "error"}
    if unknown:
        raise ValueError(f"unknown field {sorted(unknown)[0]!r}")
    if "result" in data and "error" in data:
        raise ValueError("both result and error are set")
    if "result" in data:
        if not isinstance(data["result"], str):
            raise ValueError("result is not a base64 string")
        base64.b64decode(data["result"], validate=True)
    if "error" in data and not isinstance(data["error"], str):
        raise ValueError("error is not a string")


def _require_version(version: Any) -> str:
    if not isinstance(version, str):
        raise TypeError(f"channel version must be a string, got {type(version).__name__}")
    return version


@dataclass
class IBCModule:
    """Controller-side IBC callbacks; incoming packets are refused."""

    keeper: Any = None

    def on_chan_open_init(self, version: str) -> str:
        """Accept the proposed version unchanged."""
        return _require_version(version)

    def on_chan_open_try(self, counterparty_version: str) -> str:
        """A controller never opens on try; the negotiated version is empty."""
        _require_version(counterparty_version)
        return ""

    def on_recv_packet(self, packet: Any) -> dict[str, str]:
        """Return an error acknowledgement in its JSON form."""
        return {"error": f"ABCI code: {_INTERNAL_ABCI_CODE}: {_ACK_ERROR_STRING}"}

    def on_acknowledgement_packet(self, packet: Any, acknowledgement: bytes) -> None:
        try:
            _check_acknowledgement(acknowledgement)
        except (ValueError, binascii.Error) as exc:
            raise UnknownRequestError(
                f"cannot unmarshal ICS-27 packet acknowledgement: {exc}"
            ) from exc

    def on_timeout_packet(self, packet: Any) -> None:
        """Timeouts need no handling beyond requiring a packet."""
        if packet is None:
            raise InvalidRequestError("packet cannot be empty")