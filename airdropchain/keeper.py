"""State keeper of the airdrop module: allocations, parameters, claims and queries."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional, Protocol, Union

from .errors import (
    AllocationAlreadyClaimedError,
    AllocationDoesNotExistError,
    InvalidRequestError,
    SignatureVerificationError,
)
from .signature import verify_signature
from .types import (
    ATTRIBUTE_KEY_ADDRESS,
    ATTRIBUTE_KEY_AMOUNT,
    ATTRIBUTE_KEY_REWARD_ADDRESS,
    EVENT_TYPE_CLAIM_ALLOCATION,
    MODULE_NAME,
    AirdropAllocation,
    Coin,
    Params,
    acc_address_from_bech32,
)

Owner = Union[str, bytes]


@dataclass(frozen=True)
class Event:
    """A typed event with ordered key/value attributes."""

    type: str
    attributes: tuple[tuple[str, str], ...] = ()


class BankKeeper(Protocol):
    """The bank operations the airdrop module depends on."""

    def send_coins_from_module_to_account(
        self, module: str, address: bytes, coins: Iterable[Coin]
    ) -> None: ...

    def send_coins_from_account_to_module(
        self, address: bytes, module: str, coins: Iterable[Coin]
    ) -> None: ...


@dataclass
class InMemoryBank:
    """A simple bank holding balances of module accounts (by name) and accounts (by bytes)."""

    balances: dict[Owner, dict[str, int]] = field(default_factory=dict)

    def _transfer(self, sender: Owner, recipient: Owner, coins: Iterable[Coin]) -> None:
        coins = list(coins)
        held = self.balances.get(sender, {})
        needed: dict[str, int] = {}
        for coin in coins:
            needed[coin.denom] = needed.get(coin.denom, 0) + coin.amount
        for denom, amount in needed.items():
            available = held.get(denom, 0)
            if available < amount:
                raise ValueError(
                    f"insufficient funds: {available}{denom} is smaller than {amount}{denom}"
                )
        sender_balance = self.balances.setdefault(sender, {})
        recipient_balance = self.balances.setdefault(recipient, {})
        for denom, amount in needed.items():
            sender_balance[denom] -= amount
            recipient_balance[denom] = recipient_balance.get(denom, 0) + amount

    def send_coins_from_module_to_account(
        self, module: str, address: bytes, coins: Iterable[Coin]
    ) -> None:
        self._transfer(module, bytes(address), coins)

    def send_coins_from_account_to_module(
        self, address: bytes, module: str, coins: Iterable[Coin]
    ) -> None:
        self._transfer(bytes(address), module, coins)

    def balance(self, owner: Owner, denom: str) -> Coin:
        return Coin(denom, self.balances.get(owner, {}).get(denom, 0))

    def mint(self, owner: Owner, coins: Iterable[Coin]) -> None:
        held = self.balances.setdefault(owner, {})
        for coin in coins:
            held[coin.denom] = held.get(coin.denom, 0) + coin.amount


class Keeper:
    """Keeps airdrop allocations and module parameters."""

    def __init__(self, bank_keeper: BankKeeper, params: Optional[Params] = None):
        self.bank_keeper = bank_keeper
        self._params = dataclasses.replace(params) if params is not None else Params()
        self._allocations: dict[str, dict] = {}
        self.events: list[Event] = []
        self.logger = logging.getLogger(f"x/{MODULE_NAME}")

    def get_allocation(self, address: str) -> Optional[AirdropAllocation]:
        stored = self._allocations.get(address)
        if stored is None:
            return None
        return AirdropAllocation.from_dict(stored)

    def all_allocations(self) -> list[AirdropAllocation]:
        """All allocations, ordered by the bytes of their address."""
        return [
            AirdropAllocation.from_dict(self._allocations[key])
            for key in sorted(self._allocations, key=lambda a: a.encode("utf-8"))
        ]

    def set_allocation(self, allocation: AirdropAllocation) -> None:
        self._allocations[allocation.address] = allocation.to_dict()

    def delete_allocation(self, address: str) -> None:
        self._allocations.pop(address, None)

    def claim_allocation(
        self, address: str, pub_key: str, reward_address: str, signature: str
    ) -> Coin:
        """Pay the unclaimed part of an allocation to the reward address and return it."""
        allocation = self.get_allocation(address)
        if allocation is None:
            raise AllocationDoesNotExistError()

        unclaimed = allocation.amount.sub(allocation.claimed_amount)
        if unclaimed.is_zero():
            raise AllocationAlreadyClaimedError()

        if not verify_signature(
            allocation.chain, allocation.address, pub_key, reward_address, signature
        ):
            raise SignatureVerificationError()

        recipient = acc_address_from_bech32(reward_address)
        self.bank_keeper.send_coins_from_module_to_account(
            MODULE_NAME, recipient, (unclaimed,)
        )

        allocation.claimed_amount = allocation.amount
        self.set_allocation(allocation)

        self.events.append(
            Event(
                EVENT_TYPE_CLAIM_ALLOCATION,
                (
                    (ATTRIBUTE_KEY_ADDRESS, address),
                    (ATTRIBUTE_KEY_AMOUNT, str(unclaimed)),
                    (ATTRIBUTE_KEY_REWARD_ADDRESS, reward_address),
                ),
            )
        )
        return unclaimed

    def param_set(self) -> Params:
        return dataclasses.replace(self._params)

    def set_param_set(self, params: Params) -> None:
        self._params = dataclasses.replace(params)

    def query_allocation(self, address: Optional[str]) -> Optional[AirdropAllocation]:
        if address is None:
            raise InvalidRequestError()
        return self.get_allocation(address)

    def query_params(self) -> Params:
        return self.param_set()