"""Bulk airdrop allocation from CSV files: parsing, accumulation, export and batching."""

from __future__ import annotations

import csv
import dataclasses
import re
from collections.abc import Callable, Iterable, Iterator, Sequence
from decimal import Decimal
from os import PathLike
from typing import Optional, Union

from .types import BASE_COIN_UNIT, AirdropAllocation, Coin, MsgSetAllocation

MICRO = 10**6
MAX_DECIMALS = 18
CSV_HEADER = ("address", "amount", "claimed")

_DECIMAL_RE = re.compile(r"-?(?:[0-9]*\.[0-9]+|[0-9]+)")

Lookup = Optional[Callable[[str], Optional[AirdropAllocation]]]
Batch = tuple[int, list[MsgSetAllocation]]


def read_airdrop_csv(path: Union[str, PathLike]) -> list[list[str]]:
    """Read an airdrop CSV file and return its data rows, without the header row.

    Every record must hold as many fields as the first one.
    """
    with open(path, newline="", encoding="utf-8") as handle:
        records = [row for row in csv.reader(handle) if row]
    if not records:
        raise ValueError(f"{path}: no records in airdrop file")
    width = len(records[0])
    for number, row in enumerate(records, start=1):
        if len(row) != width:
            raise ValueError(f"record on line {number}: wrong number of fields")
    return records[1:]


def to_micro_units(amount: str) -> int:
    """Convert a decimal token amount to micro units, truncating toward zero."""
    if not _DECIMAL_RE.fullmatch(amount):
        raise ValueError(f"invalid decimal string: {amount!r}")
    _, _, fraction = amount.partition(".")
    if len(fraction) > MAX_DECIMALS:
        raise ValueError(
            f"value {amount!r} exceeds max precision by {len(fraction) - MAX_DECIMALS} decimal places"
        )
    return int(Decimal(amount) * MICRO)


def format_micro_units(amount: int) -> str:
    """Render micro units as a decimal token amount with 18 fractional digits."""
    sign = "-" if amount < 0 else ""
    whole, rest = divmod(abs(amount), MICRO)
    return f"{sign}{whole}.{rest:06d}" + "0" * (MAX_DECIMALS - 6)


def _entry(row: Sequence[str]) -> tuple[str, int]:
    if len(row) < 2:
        raise ValueError(f"record {list(row)!r} needs an address and an amount")
    return row[0], to_micro_units(row[1])


def _existing(lookup: Lookup, address: str) -> Optional[AirdropAllocation]:
    if lookup is None:
        return None
    return lookup(address)


def accumulate_allocations(
    rows: Iterable[Sequence[str]], chain: str, lookup: Lookup = None
) -> list[AirdropAllocation]:
    """Add each row's amount to the address's existing allocation, or to a fresh one.

    ``lookup`` returns the allocation already on chain for an address, or None.
    """
    result = []
    for row in rows:
        address, amount = _entry(row)
        current = _existing(lookup, address)
        if current is None:
            current = AirdropAllocation(
                chain=chain,
                address=address,
                amount=Coin(BASE_COIN_UNIT, 0),
                claimed_amount=Coin(BASE_COIN_UNIT, 0),
            )
        total = Coin(current.amount.denom, current.amount.amount + amount)
        result.append(dataclasses.replace(current, amount=total))
    return result


def fetch_allocations(
    rows: Iterable[Sequence[str]], chain: str, lookup: Lookup = None
) -> list[AirdropAllocation]:
    """Return each address's on-chain allocation, or one built from the row's amount."""
    result = []
    for row in rows:
        address, amount = _entry(row)
        current = _existing(lookup, address)
        if current is None:
            current = AirdropAllocation(
                chain=chain,
                address=address,
                amount=Coin(BASE_COIN_UNIT, amount),
                claimed_amount=Coin(BASE_COIN_UNIT, 0),
            )
        else:
            current = dataclasses.replace(current)
        result.append(current)
    return result


def save_allocations(
    path: Union[str, PathLike], allocations: Iterable[AirdropAllocation]
) -> None:
    """Write allocations as CSV with amounts in whole tokens."""
    with open(path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for allocation in allocations:
            writer.writerow(
                (
                    allocation.address,
                    format_micro_units(allocation.amount.amount),
                    format_micro_units(allocation.claimed_amount.amount),
                )
            )


def batch_set_allocation_msgs(
    sender: str,
    allocations: Sequence[AirdropAllocation],
    start_index: int,
    msgs_per_tx: int,
) -> Iterator[Batch]:
    """Yield (last index, messages) batches of set-allocation messages from start_index on."""
    batch: list[MsgSetAllocation] = []
    for index, allocation in enumerate(allocations):
        if index < start_index:
            continue
        batch.append(MsgSetAllocation(sender=sender, allocation=allocation))
        if len(batch) >= msgs_per_tx or index + 1 == len(allocations):
            yield index, batch
            batch = []


def batch_claimed_msgs(
    sender: str,
    allocations: Sequence[AirdropAllocation],
    start_index: int,
    msgs_per_tx: int,
) -> Iterator[Batch]:
    """Yield batches of messages marking unclaimed allocations as fully claimed.

    Fully claimed allocations are skipped. A batch is only sent once it is full
    or its last message comes from the final allocation, so messages left over
    when the final allocation is skipped are not yielded.
    """
    batch: list[MsgSetAllocation] = []
    for index, allocation in enumerate(allocations):
        if index < start_index:
            continue
        if allocation.claimed_amount == allocation.amount:
            continue
        claimed = dataclasses.replace(allocation, claimed_amount=allocation.amount)
        batch.append(MsgSetAllocation(sender=sender, allocation=claimed))
        if len(batch) >= msgs_per_tx or index + 1 == len(allocations):
            yield index, batch
            batch = []