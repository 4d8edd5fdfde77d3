"""Coins, allocations, parameters, genesis state and messages of the airdrop module."""

from __future__ import annotations

import base64
import json
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional

from .bech32 import Bech32Error, decode_address
from .errors import (
    EmptyAddressError,
    EmptyOnChainAllocationAddressError,
    EmptyRewardAddressError,
    InvalidAddressError,
)

MODULE_NAME = "airdrop"
STORE_KEY = MODULE_NAME
ROUTER_KEY = MODULE_NAME
QUERIER_ROUTE = MODULE_NAME
KEY_PREFIX_AIRDROP_ALLOCATION = b"\x01"

EVENT_TYPE_CLAIM_ALLOCATION = "claim_allocation"
ATTRIBUTE_KEY_ADDRESS = "address"
ATTRIBUTE_KEY_AMOUNT = "amount"
ATTRIBUTE_KEY_REWARD_ADDRESS = "reward_address"

KEY_OWNER = b"Owner"

MSG_TYPE_CLAIM_ALLOCATION = "claim_allocation"
MSG_TYPE_SET_ALLOCATION = "set_allocation"
MSG_TYPE_TRANSFER_MODULE_OWNERSHIP = "transfer_module_ownership"
MSG_TYPE_SIGN_DATA = "sign_data"
MSG_TYPE_DEPOSIT_TOKENS = "deposit_tokens"

BECH32_ACCOUNT_PREFIX = "tori"
BASE_COIN_UNIT = "utori"

_DENOM = r"[a-zA-Z][a-zA-Z0-9/:._-]{2,127}"
_AMOUNT = r"[0-9]+(?:\.[0-9]+)?|\.[0-9]+"
_DENOM_RE = re.compile(_DENOM)
_COIN_RE = re.compile(rf"\s*({_AMOUNT})\s*({_DENOM})\s*")


@dataclass(frozen=True)
class Coin:
    """An integer amount of a single denomination."""

    denom: str
    amount: int

    def __post_init__(self):
        if not _DENOM_RE.fullmatch(self.denom):
            raise ValueError(f"invalid denom: {self.denom}")
        if self.amount < 0:
            raise ValueError(f"negative coin amount: {self.amount}")

    def _check_denom(self, other: Coin) -> None:
        if other.denom != self.denom:
            raise ValueError(
                f"invalid coin denominations; {self.denom}, {other.denom}"
            )

    def sub(self, other: Coin) -> Coin:
        self._check_denom(other)
        if other.amount > self.amount:
            raise ValueError("negative coin amount")
        return Coin(self.denom, self.amount - other.amount)

    def add(self, other: Coin) -> Coin:
        self._check_denom(other)
        return Coin(self.denom, self.amount + other.amount)

    def is_zero(self) -> bool:
        return self.amount == 0

    def to_dict(self) -> dict[str, str]:
        return {"denom": self.denom, "amount": str(self.amount)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Coin:
        return cls(data["denom"], int(data.get("amount", 0)))

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


def parse_coin(text: str) -> Coin:
    """Parse a coin such as "100utori"; a fractional amount is truncated."""
    match = _COIN_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid decimal coin expression: {text}")
    amount, denom = match.groups()
    return Coin(denom, int(Decimal(amount)))


def parse_coins(text: str) -> tuple[Coin, ...]:
    """Parse a comma separated coin list, dropping zeros and sorting by denom."""
    if not text.strip():
        return ()
    coins = [parse_coin(part.strip()) for part in text.split(",")]
    coins = sorted((c for c in coins if not c.is_zero()), key=lambda c: c.denom)
    seen: set[str] = set()
    for coin in coins:
        if coin.denom in seen:
            raise ValueError(f"duplicate denomination {coin.denom}")
        seen.add(coin.denom)
    return tuple(coins)


def acc_address_from_bech32(address: str) -> bytes:
    """Return the raw bytes of an account address carrying the chain prefix."""
    if not address.strip():
        raise InvalidAddressError("empty address string is not allowed")
    try:
        hrp, raw = decode_address(address)
    except Bech32Error as exc:
        raise InvalidAddressError(f"decoding bech32 failed: {exc}") from exc
    if hrp != BECH32_ACCOUNT_PREFIX:
        raise InvalidAddressError(
            f"invalid Bech32 prefix; expected {BECH32_ACCOUNT_PREFIX}, got {hrp}"
        )
    if not raw:
        raise InvalidAddressError("addresses cannot be empty")
    if len(raw) > 255:
        raise InvalidAddressError(f"address max length is 255, got {len(raw)}")
    return raw


@dataclass
class AirdropAllocation:
    """An amount allocated to an address on a native chain."""

    chain: str
    address: str
    amount: Coin
    claimed_amount: Coin

    def to_dict(self) -> dict[str, Any]:
        return {
            "chain": self.chain,
            "address": self.address,
            "amount": self.amount.to_dict(),
            "claimed_amount": self.claimed_amount.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AirdropAllocation:
        return cls(
            chain=data.get("chain", ""),
            address=data.get("address", ""),
            amount=Coin.from_dict(data["amount"]),
            claimed_amount=Coin.from_dict(data["claimed_amount"]),
        )


@dataclass
class Params:
    """Module parameters."""

    owner: str = ""


def default_params() -> Params:
    return Params(owner="tori12ezu9ms7sypmasdvxxk6x8q4nu9ndhsje7tm70")


def validate_params(params: Params) -> None:
    if not isinstance(params.owner, str):
        raise TypeError(f"invalid parameter type: {type(params.owner).__name__}")


@dataclass
class GenesisState:
    """Module state exported at and loaded from genesis."""

    params: Params = field(default_factory=Params)
    allocations: list[AirdropAllocation] = field(default_factory=list)

    def validate(self) -> None:
        """Basic genesis validation: only the parameter types are checked."""
        validate_params(self.params)

    def to_dict(self) -> dict[str, Any]:
        return {
            "params": {"owner": self.params.owner},
            "allocations": [a.to_dict() for a in self.allocations],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GenesisState:
        params = data.get("params") or {}
        return cls(
            params=Params(owner=params.get("owner", "")),
            allocations=[
                AirdropAllocation.from_dict(a) for a in data.get("allocations") or []
            ],
        )


def default_genesis() -> GenesisState:
    entries = [
        ("evm", "0x--"),
        ("solana", "--"),
        ("terra", "terra--"),
        ("cosmos", "cosmos--"),
        ("juno", "juno--"),
        ("osmosis", "osmo--"),
    ]
    return GenesisState(
        allocations=[
            AirdropAllocation(
                chain=chain,
                address=address,
                amount=Coin("utori", 100000000),
                claimed_amount=Coin("utori", 0),
            )
            for chain, address in entries
        ]
    )


def _sorted_json(obj: Any) -> bytes:
    text = json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    for char, escaped in (
        ("<", "\\u003c"),
        (">", "\\u003e"),
        ("&", "\\u0026"),
        ("\u2028", "\\u2028"),
        ("\u2029", "\\u2029"),
    ):
        text = text.replace(char, escaped)
    return text.encode()


def _omit_empty(values: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in values.items() if v not in ("", [], b"", None)}


def _sign_bytes(value: dict[str, Any], amino_name: Optional[str] = None) -> bytes:
    """Sorted amino JSON of a message value, wrapped with its type name if it has one."""
    value = _omit_empty(value)
    if amino_name is not None:
        value = {"type": amino_name, "value": value}
    return _sorted_json(value)


@dataclass
class MsgClaimAllocation:
    address: str
    reward_address: str
    signature: str
    pub_key: str = ""

    def route(self) -> str:
        return MODULE_NAME

    def msg_type(self) -> str:
        return MSG_TYPE_CLAIM_ALLOCATION

    def validate_basic(self) -> None:
        if not self.reward_address:
            raise EmptyRewardAddressError()
        if not self.address:
            raise EmptyOnChainAllocationAddressError()

    def get_sign_bytes(self) -> bytes:
        return _sign_bytes(
            {
                "address": self.address,
                "pub_key": self.pub_key,
                "reward_address": self.reward_address,
                "signature": self.signature,
            },
            "teritori/airdrop/ClaimAllocation",
        )

    def signers(self) -> list[bytes]:
        return [acc_address_from_bech32(self.reward_address)]


@dataclass
class MsgSetAllocation:
    sender: str
    allocation: AirdropAllocation

    def route(self) -> str:
        return MODULE_NAME

    def msg_type(self) -> str:
        return MSG_TYPE_SET_ALLOCATION

    def validate_basic(self) -> None:
        if not self.sender:
            raise EmptyAddressError()

    def get_sign_bytes(self) -> bytes:
        return _sign_bytes(
            {"sender": self.sender, "allocation": self.allocation.to_dict()}
        )

    def signers(self) -> list[bytes]:
        return [acc_address_from_bech32(self.sender)]


@dataclass
class MsgTransferModuleOwnership:
    sender: str
    new_owner: str

    def route(self) -> str:
        return MODULE_NAME

    def msg_type(self) -> str:
        # Reports the set-allocation type, as the chain always has.
        return MSG_TYPE_SET_ALLOCATION

    def validate_basic(self) -> None:
        if not self.sender:
            raise EmptyAddressError()

    def get_sign_bytes(self) -> bytes:
        return _sign_bytes({"sender": self.sender, "new_owner": self.new_owner})

    def signers(self) -> list[bytes]:
        return [acc_address_from_bech32(self.sender)]


@dataclass
class MsgSignData:
    signer: str
    data: bytes

    def route(self) -> str:
        return MODULE_NAME

    def msg_type(self) -> str:
        return MSG_TYPE_SIGN_DATA

    def validate_basic(self) -> None:
        """Any signer and any byte payload is accepted."""
        if not isinstance(self.data, (bytes, bytearray)):
            raise TypeError(f"sign data must be bytes, got {type(self.data).__name__}")

    def get_sign_bytes(self) -> bytes:
        return _sign_bytes(
            {
                "signer": self.signer,
                "data": base64.b64encode(self.data).decode() if self.data else "",
            },
            "sign/MsgSignData",
        )

    def signers(self) -> list[bytes]:
        return []


@dataclass
class MsgDepositTokens:
    sender: str
    amount: tuple[Coin, ...] = ()

    def route(self) -> str:
        return MODULE_NAME

    def msg_type(self) -> str:
        return MSG_TYPE_DEPOSIT_TOKENS

    def validate_basic(self) -> None:
        if not self.sender:
            raise EmptyAddressError()

    def get_sign_bytes(self) -> bytes:
        return _sign_bytes(
            {"sender": self.sender, "amount": [c.to_dict() for c in self.amount]}
        )

    def signers(self) -> list[bytes]:
        return [acc_address_from_bech32(self.sender)]