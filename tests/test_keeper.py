import pytest

from airdropchain.bech32 import encode_address
from airdropchain.errors import (
    AllocationAlreadyClaimedError,
    AllocationDoesNotExistError,
    InvalidAddressError,
    InvalidRequestError,
    SignatureVerificationError,
)
from airdropchain.keeper import Event, InMemoryBank, Keeper
from airdropchain.types import AirdropAllocation, Coin, Params, default_genesis

EVM_ADDRESS = "0x7fc66500c84a76ad7e9c93437bfc5ac33e2ddae9"
RAW = bytes(range(1, 21))
COSMOS_ADDRESS = encode_address("cosmos", RAW)
REWARD_ADDRESS = encode_address("tori", RAW)


@pytest.fixture
def bank():
    return InMemoryBank()


@pytest.fixture
def keeper(bank):
    k = Keeper(bank)
    for allocation in default_genesis().allocations:
        k.set_allocation(allocation)
    return k


def _cosmos_allocation(amount=1000000, claimed=0):
    return AirdropAllocation(
        chain="cosmos",
        address=COSMOS_ADDRESS,
        amount=Coin("utori", amount),
        claimed_amount=Coin("utori", claimed),
    )


def test_allocation_get_set(keeper):
    assert keeper.get_allocation(EVM_ADDRESS) is None
    assert len(keeper.all_allocations()) == 6

    evm_allocation = AirdropAllocation(
        chain="evm",
        address=EVM_ADDRESS,
        amount=Coin("utori", 1000000),
        claimed_amount=Coin("utori", 0),
    )
    keeper.set_allocation(evm_allocation)
    assert keeper.get_allocation(EVM_ADDRESS) == evm_allocation
    assert len(keeper.all_allocations()) == 7

    keeper.delete_allocation(EVM_ADDRESS)
    assert keeper.get_allocation(EVM_ADDRESS) is None
    assert len(keeper.all_allocations()) == 6


def test_all_allocations_sorted_by_address(keeper):
    addresses = [a.address for a in keeper.all_allocations()]
    assert addresses == sorted(addresses, key=lambda a: a.encode())


def test_stored_allocation_is_a_copy(keeper):
    allocation = _cosmos_allocation()
    keeper.set_allocation(allocation)
    allocation.chain = "changed"
    assert keeper.get_allocation(COSMOS_ADDRESS).chain == "cosmos"


def test_claim_allocation_pays_reward(keeper, bank):
    bank.mint("airdrop", [Coin("utori", 5000000)])
    keeper.set_allocation(_cosmos_allocation())
    paid = keeper.claim_allocation(COSMOS_ADDRESS, "", REWARD_ADDRESS, "")
    assert paid == Coin("utori", 1000000)
    assert bank.balance(RAW, "utori") == Coin("utori", 1000000)
    assert bank.balance("airdrop", "utori") == Coin("utori", 4000000)
    stored = keeper.get_allocation(COSMOS_ADDRESS)
    assert stored.claimed_amount == stored.amount
    assert keeper.events[-1] == Event(
        "claim_allocation",
        (
            ("address", COSMOS_ADDRESS),
            ("amount", "1000000utori"),
            ("reward_address", REWARD_ADDRESS),
        ),
    )


def test_claim_partial_pays_remainder(keeper, bank):
    bank.mint("airdrop", [Coin("utori", 5000000)])
    keeper.set_allocation(_cosmos_allocation(amount=1000000, claimed=400000))
    paid = keeper.claim_allocation(COSMOS_ADDRESS, "", REWARD_ADDRESS, "")
    assert paid.amount + 400000 == 1000000
    assert bank.balance(RAW, "utori") == paid


def test_claim_twice_fails(keeper, bank):
    bank.mint("airdrop", [Coin("utori", 5000000)])
    keeper.set_allocation(_cosmos_allocation())
    keeper.claim_allocation(COSMOS_ADDRESS, "", REWARD_ADDRESS, "")
    with pytest.raises(AllocationAlreadyClaimedError):
        keeper.claim_allocation(COSMOS_ADDRESS, "", REWARD_ADDRESS, "")


def test_claim_missing_allocation(keeper):
    with pytest.raises(AllocationDoesNotExistError):
        keeper.claim_allocation(COSMOS_ADDRESS, "", REWARD_ADDRESS, "")


def test_claim_wrong_reward_address(keeper, bank):
    bank.mint("airdrop", [Coin("utori", 5000000)])
    keeper.set_allocation(_cosmos_allocation())
    other = encode_address("tori", bytes(20))
    with pytest.raises(SignatureVerificationError):
        keeper.claim_allocation(COSMOS_ADDRESS, "", other, "")
    assert keeper.get_allocation(COSMOS_ADDRESS).claimed_amount.is_zero()


def test_claim_with_wrong_prefix_reward_address(keeper, bank):
    bank.mint("airdrop", [Coin("utori", 5000000)])
    allocation = _cosmos_allocation()
    keeper.set_allocation(allocation)
    # Verification passes only for the tori form, so an unfunded module is the next failure.
    with pytest.raises(SignatureVerificationError):
        keeper.claim_allocation(COSMOS_ADDRESS, "", COSMOS_ADDRESS, "")


def test_claim_without_module_funds_keeps_state(keeper, bank):
    keeper.set_allocation(_cosmos_allocation())
    with pytest.raises(ValueError):
        keeper.claim_allocation(COSMOS_ADDRESS, "", REWARD_ADDRESS, "")
    assert keeper.get_allocation(COSMOS_ADDRESS).claimed_amount.is_zero()
    assert keeper.events == []


def test_params_round_trip(keeper):
    keeper.set_param_set(Params(owner=REWARD_ADDRESS))
    assert keeper.param_set() == Params(owner=REWARD_ADDRESS)
    assert keeper.query_params().owner == REWARD_ADDRESS


def test_param_set_returns_copy(keeper):
    params = keeper.param_set()
    params.owner = "someone"
    assert keeper.param_set().owner == ""


def test_query_allocation(keeper):
    keeper.set_allocation(_cosmos_allocation())
    assert keeper.query_allocation(COSMOS_ADDRESS) == _cosmos_allocation()
    assert keeper.query_allocation(EVM_ADDRESS) is None
    with pytest.raises(InvalidRequestError):
        keeper.query_allocation(None)


def test_bank_transfers_and_rejects_overdraft(bank):
    bank.mint(RAW, [Coin("utori", 10)])
    bank.send_coins_from_account_to_module(RAW, "airdrop", [Coin("utori", 7)])
    assert bank.balance(RAW, "utori").amount == 3
    assert bank.balance("airdrop", "utori").amount == 7
    with pytest.raises(ValueError):
        bank.send_coins_from_account_to_module(RAW, "airdrop", [Coin("utori", 4)])
    assert bank.balance(RAW, "utori").amount == 3


def test_invalid_reward_address_after_verification(bank):
    keeper = Keeper(bank)
    allocation = AirdropAllocation(
        chain="cosmos",
        address=COSMOS_ADDRESS,
        amount=Coin("utori", 10),
        claimed_amount=Coin("utori", 0),
    )
    keeper.set_allocation(allocation)
    with pytest.raises((SignatureVerificationError, InvalidAddressError)):
        keeper.claim_allocation(COSMOS_ADDRESS, "", "not-an-address", "")