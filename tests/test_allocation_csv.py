import pytest

from airdropchain.allocation_csv import (
    accumulate_allocations,
    batch_claimed_msgs,
    batch_set_allocation_msgs,
    fetch_allocations,
    format_micro_units,
    read_airdrop_csv,
    save_allocations,
    to_micro_units,
)
from airdropchain.types import BASE_COIN_UNIT, AirdropAllocation, Coin


def _alloc(address, amount, claimed=0, chain="cosmos"):
    return AirdropAllocation(
        chain=chain,
        address=address,
        amount=Coin(BASE_COIN_UNIT, amount),
        claimed_amount=Coin(BASE_COIN_UNIT, claimed),
    )


def test_read_skips_header(tmp_path):
    path = tmp_path / "drop.csv"
    path.write_text("address,amount\ncosmos1aaa,1.5\ncosmos1bbb,2\n")
    assert read_airdrop_csv(path) == [["cosmos1aaa", "1.5"], ["cosmos1bbb", "2"]]


def test_read_rejects_uneven_records(tmp_path):
    path = tmp_path / "drop.csv"
    path.write_text("address,amount\ncosmos1aaa,1.5,extra\n")
    with pytest.raises(ValueError):
        read_airdrop_csv(path)


def test_read_rejects_empty_file(tmp_path):
    path = tmp_path / "drop.csv"
    path.write_text("")
    with pytest.raises(ValueError):
        read_airdrop_csv(path)


def test_to_micro_units_value():
    assert to_micro_units("2.5") == 2_500_000


def test_to_micro_units_truncates():
    assert to_micro_units("0.0000001") == 0


@pytest.mark.parametrize("text", ["abc", "5.", "", "1.0000000000000000001", "1,5"])
def test_to_micro_units_rejects(text):
    with pytest.raises(ValueError):
        to_micro_units(text)


@pytest.mark.parametrize("amount", [0, 1, 999_999, 1_000_000, 123_456_789, -42])
def test_format_round_trip(amount):
    assert to_micro_units(format_micro_units(amount)) == amount


def test_format_micro_units_value():
    assert format_micro_units(1_500_000) == "1.500000000000000000"


def test_accumulate_without_existing():
    result = accumulate_allocations([["stars1x", "3"]], "stargaze")
    assert len(result) == 1
    assert result[0].chain == "stargaze"
    assert result[0].address == "stars1x"
    assert result[0].amount == Coin(BASE_COIN_UNIT, to_micro_units("3"))
    assert result[0].claimed_amount.is_zero()


def test_accumulate_adds_to_existing():
    existing = _alloc("cosmos1a", 10, claimed=4, chain="cosmos")
    result = accumulate_allocations(
        [["cosmos1a", "1"]], "cosmos", lambda addr: existing if addr == "cosmos1a" else None
    )
    assert result[0].amount.amount == existing.amount.amount + to_micro_units("1")
    assert result[0].claimed_amount == existing.claimed_amount
    assert existing.amount.amount == 10


def test_accumulate_rejects_short_row():
    with pytest.raises(ValueError):
        accumulate_allocations([["cosmos1a"]], "cosmos")


def test_fetch_uses_row_amount_or_lookup():
    existing = _alloc("evmos1b", 7, claimed=7, chain="evmos")
    lookup = {"evmos1b": existing}.get
    result = fetch_allocations([["evmos1a", "4"], ["evmos1b", "9"]], "evmos", lookup)
    assert result[0].amount == Coin(BASE_COIN_UNIT, to_micro_units("4"))
    assert result[0].chain == "evmos"
    assert result[1] == existing


def test_save_and_read_back(tmp_path):
    path = tmp_path / "out.csv"
    allocations = [_alloc("evmos1a", 2_000_000, 500_000), _alloc("evmos1b", 1, 0)]
    save_allocations(path, allocations)
    assert path.read_text().splitlines()[0] == "address,amount,claimed"
    rows = read_airdrop_csv(path)
    assert [r[0] for r in rows] == ["evmos1a", "evmos1b"]
    for row, allocation in zip(rows, allocations):
        assert to_micro_units(row[1]) == allocation.amount.amount
        assert to_micro_units(row[2]) == allocation.claimed_amount.amount


def test_batch_set_allocation_msgs():
    allocations = [_alloc(f"cosmos1{i}", i + 1) for i in range(5)]
    batches = list(batch_set_allocation_msgs("tori1sender", allocations, 1, 2))
    assert all(len(msgs) <= 2 for _, msgs in batches)
    assert batches[-1][0] == len(allocations) - 1
    sent = [m.allocation for _, msgs in batches for m in msgs]
    assert sent == allocations[1:]
    assert all(m.sender == "tori1sender" for _, msgs in batches for m in msgs)


def test_batch_claimed_marks_claimed_and_skips():
    allocations = [_alloc("a1", 5), _alloc("a2", 3, 3), _alloc("a3", 8, 2)]
    batches = list(batch_claimed_msgs("tori1sender", allocations, 0, 10))
    sent = [m.allocation for _, msgs in batches for m in msgs]
    assert [a.address for a in sent] == ["a1", "a3"]
    assert all(a.claimed_amount == a.amount for a in sent)
    assert allocations[0].claimed_amount.is_zero()


def test_batch_claimed_drops_tail_after_final_claimed():
    allocations = [_alloc("a1", 5), _alloc("a2", 3, 3)]
    assert list(batch_claimed_msgs("tori1sender", allocations, 0, 10)) == []