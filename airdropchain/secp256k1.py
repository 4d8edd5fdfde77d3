"""Arithmetic on the secp256k1 curve: key parsing, ECDSA verification and recovery."""

from __future__ import annotations

from typing import Optional, Tuple

P = 2**256 - 2**32 - 977
N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
G = (
    0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798,
    0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8,
)

Point = Optional[Tuple[int, int]]


def _add(a: Point, b: Point) -> Point:
    if a is None:
        return b
    if b is None:
        return a
    x1, y1 = a
    x2, y2 = b
    if x1 == x2:
        if (y1 + y2) % P == 0:
            return None
        lam = 3 * x1 * x1 * pow(2 * y1, -1, P) % P
    else:
        lam = (y2 - y1) * pow(x2 - x1, -1, P) % P
    x3 = (lam * lam - x1 - x2) % P
    y3 = (lam * (x1 - x3) - y1) % P
    return (x3, y3)


def _multiply(k: int, point: Point) -> Point:
    result: Point = None
    addend = point
    while k:
        if k & 1:
            result = _add(result, addend)
        addend = _add(addend, addend)
        k >>= 1
    return result


def _is_on_curve(x: int, y: int) -> bool:
    return (y * y - x * x * x - 7) % P == 0


def _lift_x(x: int, odd: int) -> int:
    y_squared = (pow(x, 3, P) + 7) % P
    y = pow(y_squared, (P + 1) // 4, P)
    if y * y % P != y_squared:
        raise ValueError("x coordinate is not on the curve")
    if y & 1 != odd:
        y = P - y
    return y


def decompress_point(data: bytes) -> tuple[int, int]:
    """Parse a 33-byte compressed or 65-byte uncompressed public key."""
    data = bytes(data)
    if len(data) == 33 and data[0] in (2, 3):
        x = int.from_bytes(data[1:], "big")
        if x >= P:
            raise ValueError("x coordinate out of range")
        return (x, _lift_x(x, data[0] & 1))
    if len(data) == 65 and data[0] == 4:
        x = int.from_bytes(data[1:33], "big")
        y = int.from_bytes(data[33:], "big")
        if x >= P or y >= P or not _is_on_curve(x, y):
            raise ValueError("point is not on the curve")
        return (x, y)
    raise ValueError(f"malformed public key of {len(data)} bytes")


def point_to_bytes(point: Point, compressed: bool = True) -> bytes:
    """Serialise a curve point in compressed or uncompressed form."""
    if point is None:
        raise ValueError("cannot serialise the point at infinity")
    x, y = point
    if compressed:
        return bytes([2 | (y & 1)]) + x.to_bytes(32, "big")
    return b"\x04" + x.to_bytes(32, "big") + y.to_bytes(32, "big")


def recover_public_key(msg_hash: bytes, signature: bytes) -> tuple[int, int]:
    """Recover the signing key from a 65-byte r || s || recovery-id signature."""
    if len(signature) != 65:
        raise ValueError(f"invalid signature length {len(signature)}")
    r = int.from_bytes(signature[:32], "big")
    s = int.from_bytes(signature[32:64], "big")
    recid = signature[64]
    if recid > 3:
        raise ValueError(f"invalid recovery id {recid}")
    if not 0 < r < N or not 0 < s < N:
        raise ValueError("signature values out of range")
    x = r + (recid >> 1) * N
    if x >= P:
        raise ValueError("invalid signature r value")
    big_r = (x, _lift_x(x, recid & 1))
    e = int.from_bytes(msg_hash, "big") % N
    r_inv = pow(r, -1, N)
    q = _add(_multiply(s * r_inv % N, big_r), _multiply(-e * r_inv % N, G))
    if q is None:
        raise ValueError("recovered the point at infinity")
    return q


def verify(pub_key: bytes, msg_hash: bytes, signature: bytes) -> bool:
    """Check a 64-byte r || s signature; high-s (malleable) signatures are rejected."""
    if len(signature) != 64:
        return False
    try:
        q = decompress_point(pub_key)
    except ValueError:
        return False
    r = int.from_bytes(signature[:32], "big")
    s = int.from_bytes(signature[32:], "big")
    if not 0 < r < N or not 0 < s <= N // 2:
        return False
    e = int.from_bytes(msg_hash, "big") % N
    w = pow(s, -1, N)
    point = _add(_multiply(e * w % N, G), _multiply(r * w % N, q))
    if point is None:
        return False
    return point[0] % N == r