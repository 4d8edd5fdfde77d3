# airdropchain

A self-contained airdrop ledger. It keeps per-address token allocations,
lets holders on other chains claim them after proving that they control
their address, and carries the message types for interchain-account
transactions.

## Modules

- **`airdropchain.types`** – `Coin` (with `add`, `sub`, `is_zero`),
  `parse_coin`, `parse_coins`, `acc_address_from_bech32` (accepts only
  `tori` addresses), `AirdropAllocation`, `Params`, `GenesisState`,
  `default_genesis()` and `default_params()`, and the messages
  `MsgClaimAllocation`, `MsgSetAllocation`, `MsgTransferModuleOwnership`,
  `MsgSignData` and `MsgDepositTokens`. Each message has `route()`,
  `msg_type()`, `validate_basic()`, `get_sign_bytes()` (sorted compact
  JSON) and `signers()`.
- **`airdropchain.signature`** – `verify_signature(chain, address, pub_key,
  reward_addr, signature)` returns whether a claimant controls `address` on
  `chain`:
  - `evm`: recovers the key from a 65-byte personal-message signature and
    compares its checksummed address;
  - `solana`: ed25519 verification against the base58 address;
  - `terra`: the hex public key must derive the `terra` bech32 address and
    verify the secp256k1 signature;
  - `cosmos`, `juno`, `osmosis`, `stargaze`: the address bytes re-encoded
    with the `tori` prefix must equal the reward address.

  Any other chain, and any malformed input, gives `False`. Helpers:
  `sign_message_bytes`, `text_hash`, `b58decode`, `evm_address`,
  `cosmos_address`.
- **`airdropchain.keeper`** – `Keeper` stores allocations and parameters
  in memory, answers `query_allocation` and `query_params`, and
  `claim_allocation` pays the unclaimed amount through a bank, marks the
  allocation claimed, appends a `claim_allocation` `Event` to
  `keeper.events` and returns the paid `Coin`. `InMemoryBank` is a simple
  bank satisfying the `BankKeeper` protocol, with `mint` and `balance`.
- **`airdropchain.msg_server`** – `MsgServer` applies messages; only the
  module owner may set allocations or transfer ownership, and `handle`
  dispatches by message type, raising `UnknownRequestError` otherwise.
  `init_genesis` / `export_genesis` work on `GenesisState`;
  `AirdropModule` does the same on genesis JSON.
- **`airdropchain.allocation_csv`** – `read_airdrop_csv` reads an
  `address,amount` file (header row dropped), `to_micro_units` and
  `format_micro_units` convert amounts, `accumulate_allocations` and
  `fetch_allocations` combine rows with already known allocations,
  `save_allocations` writes an `address,amount,claimed` file, and
  `batch_set_allocation_msgs` / `batch_claimed_msgs` yield
  `(last_index, messages)` batches of `MsgSetAllocation`.
- **`airdropchain.intertx`** – `MsgRegisterAccount`, `MsgSubmitTx`,
  `QueryInterchainAccountRequest`, `QueryInterchainAccountResponse`,
  `controller_port_id` and the `IBCModule` channel callbacks (incoming
  packets are answered with an error acknowledgement).
- **`airdropchain.bech32`** and **`airdropchain.secp256k1`** – pure-Python
  primitives used by the verifier.

Errors are subclasses of `airdropchain.errors.ModuleError`, for example
`AllocationDoesNotExistError`, `AllocationAlreadyClaimedError`,
`SignatureVerificationError` and `NotEnoughPermissionError`.

## Example

```python
from airdropchain.keeper import InMemoryBank, Keeper
from airdropchain.types import AirdropAllocation, Coin

bank = InMemoryBank()
bank.mint("airdrop", [Coin("utori", 1_000_000)])
keeper = Keeper(bank)
keeper.set_allocation(
    AirdropAllocation(
        chain="evm",
        address="0x583e8DD54b7C3F5Ea23862E0E852f0e6914475D5",
        amount=Coin("utori", 1_000_000),
        claimed_amount=Coin("utori", 0),
    )
)
paid = keeper.claim_allocation(
    "0x583e8DD54b7C3F5Ea23862E0E852f0e6914475D5",
    "",
    "tori1pkmvlnstq8q7djns3w882pcu92xh4c9x4ukhcd",
    "0xf2cde652dbe26e73e508782d673850ac10880fafef4f7cd2599fd434736ef0ca"
    "2d8a2bd65c7f8b67abc1a837f95a23e3c34789dd0ac230cb9b04000641d62b521c",
)
assert str(paid) == "1000000utori"
```

The signed payload is the compact JSON object
`{"chain":...,"address":...,"rewardAddr":...}`, as produced by
`sign_message_bytes(chain, address, reward_addr)`.

## What it does not do

The package is a library only. It has no command-line tool, does not run
a chain node or network service, and does not sign or broadcast
transactions: the CSV batching functions yield messages for the caller to
submit. State is kept in memory; persisting it is left to the caller, for
instance through the genesis JSON of `AirdropModule`. The `IBCModule`
callbacks and interchain-account messages are data and validation only;
nothing here opens channels or relays packets.

## Requirements

Python 3.10 or later, with `pycryptodome` (Keccak-256 and RIPEMD-160) and
`pynacl` (ed25519 verification). Tests use `pytest` (`pip install
.[test]`).