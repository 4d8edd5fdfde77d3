"""Message handling, genesis import/export and module wiring of the airdrop module."""

from __future__ import annotations

import json
from typing import Any, Union

from .errors import NotEnoughPermissionError, UnknownRequestError
from .keeper import Keeper
from .types import (
    MODULE_NAME,
    QUERIER_ROUTE,
    Coin,
    GenesisState,
    MsgClaimAllocation,
    MsgDepositTokens,
    MsgSetAllocation,
    MsgTransferModuleOwnership,
    acc_address_from_bech32,
    default_genesis,
)


class MsgServer:
    """Executes airdrop messages against a keeper."""

    def __init__(self, keeper: Keeper):
        self.keeper = keeper

    def claim_allocation(self, msg: MsgClaimAllocation) -> Coin:
        return self.keeper.claim_allocation(
            msg.address, msg.pub_key, msg.reward_address, msg.signature
        )

    def _require_owner(self, sender: str) -> None:
        if sender != self.keeper.param_set().owner:
            raise NotEnoughPermissionError()

    def set_allocation(self, msg: MsgSetAllocation) -> None:
        self._require_owner(msg.sender)
        self.keeper.set_allocation(msg.allocation)

    def transfer_module_ownership(self, msg: MsgTransferModuleOwnership) -> None:
        params = self.keeper.param_set()
        if msg.sender != params.owner:
            raise NotEnoughPermissionError()
        params.owner = msg.new_owner
        self.keeper.set_param_set(params)

    def deposit_tokens(self, msg: MsgDepositTokens) -> None:
        sender = acc_address_from_bech32(msg.sender)
        self.keeper.bank_keeper.send_coins_from_account_to_module(
            sender, MODULE_NAME, msg.amount
        )

    def handle(self, msg: Any) -> Any:
        """Dispatch a message to its handler."""
        if isinstance(msg, MsgClaimAllocation):
            return self.claim_allocation(msg)
        if isinstance(msg, MsgSetAllocation):
            return self.set_allocation(msg)
        if isinstance(msg, MsgTransferModuleOwnership):
            return self.transfer_module_ownership(msg)
        if isinstance(msg, MsgDepositTokens):
            return self.deposit_tokens(msg)
        raise UnknownRequestError(
            f"unrecognized {MODULE_NAME} message type: {type(msg).__name__}"
        )


def init_genesis(keeper: Keeper, genesis: GenesisState) -> None:
    """Load parameters and allocations from a genesis state."""
    keeper.set_param_set(genesis.params)
    for allocation in genesis.allocations:
        keeper.set_allocation(allocation)


def export_genesis(keeper: Keeper) -> GenesisState:
    return GenesisState(params=keeper.param_set(), allocations=keeper.all_allocations())


def _parse_genesis(raw: Union[str, bytes]) -> GenesisState:
    try:
        return GenesisState.from_dict(json.loads(raw))
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        raise ValueError(
            f"failed to unmarshal {MODULE_NAME} genesis state: {exc}"
        ) from exc


class AirdropModule:
    """The airdrop module as an application sees it."""

    querier_route = QUERIER_ROUTE

    def __init__(self, keeper: Keeper):
        self.keeper = keeper
        self.msg_server = MsgServer(keeper)

    def name(self) -> str:
        return MODULE_NAME

    def default_genesis(self) -> str:
        return json.dumps(default_genesis().to_dict())

    def validate_genesis(self, raw: Union[str, bytes]) -> None:
        _parse_genesis(raw).validate()

    def init_genesis(self, raw: Union[str, bytes]) -> list:
        """Import genesis JSON; no validator updates result."""
        init_genesis(self.keeper, _parse_genesis(raw))
        return []

    def export_genesis(self) -> str:
        return json.dumps(export_genesis(self.keeper).to_dict())

    def end_block(self) -> list:
        """End-of-block processing; the module has none and yields no validator updates."""
        return []

    def consensus_version(self) -> int:
        return 1