"""Bech32 encoding and decoding of account addresses."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
MAX_LENGTH = 1023
_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)


class Bech32Error(ValueError):
    """Raised for malformed bech32 strings or data."""


def _polymod(values: Iterable[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = ((chk & 0x1FFFFFF) << 5) ^ value
        for i, gen in enumerate(_GENERATOR):
            if (top >> i) & 1:
                chk ^= gen
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _checksum(hrp: str, data: Sequence[int]) -> list[int]:
    pm = _polymod(_hrp_expand(hrp) + list(data) + [0] * 6) ^ 1
    return [(pm >> 5 * (5 - i)) & 31 for i in range(6)]


def bech32_encode(hrp: str, data: Sequence[int]) -> str:
    """Encode a human-readable part and 5-bit groups into a bech32 string."""
    hrp = hrp.lower()
    if any(not 0 <= v < 32 for v in data):
        raise Bech32Error("data contains values outside the 5-bit range")
    combined = list(data) + _checksum(hrp, data)
    return hrp + "1" + "".join(CHARSET[v] for v in combined)


def bech32_decode(bech: str) -> tuple[str, list[int]]:
    """Decode a bech32 string into its lower-case prefix and 5-bit groups."""
    if len(bech) > MAX_LENGTH:
        raise Bech32Error(f"invalid bech32 string length {len(bech)}")
    if any(ord(c) < 33 or ord(c) > 126 for c in bech):
        raise Bech32Error("invalid character in bech32 string")
    if bech.lower() != bech and bech.upper() != bech:
        raise Bech32Error("string not all lowercase or all uppercase")
    bech = bech.lower()
    pos = bech.rfind("1")
    if pos < 1 or pos + 7 > len(bech):
        raise Bech32Error("invalid separator position")
    hrp = bech[:pos]
    try:
        data = [CHARSET.index(c) for c in bech[pos + 1:]]
    except ValueError as exc:
        raise Bech32Error("invalid character in data part") from exc
    if _polymod(_hrp_expand(hrp) + data) != 1:
        raise Bech32Error("invalid checksum")
    return hrp, data[:-6]


def convert_bits(data: Iterable[int], from_bits: int, to_bits: int, pad: bool) -> list[int]:
    """Regroup a sequence of from_bits-wide values into to_bits-wide values."""
    acc = 0
    bits = 0
    out: list[int] = []
    maxv = (1 << to_bits) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise Bech32Error(f"invalid data value {value}")
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & maxv)
    if pad:
        if bits:
            out.append((acc << (to_bits - bits)) & maxv)
    elif bits >= from_bits or (acc << (to_bits - bits)) & maxv:
        raise Bech32Error("invalid padding")
    return out


def encode_address(hrp: str, raw: bytes) -> str:
    """Encode raw address bytes under the given prefix."""
    return bech32_encode(hrp, convert_bits(raw, 8, 5, True))


def decode_address(address: str) -> tuple[str, bytes]:
    """Decode an address into its prefix and raw bytes."""
    hrp, data = bech32_decode(address)
    return hrp, bytes(convert_bits(data, 5, 8, False))