"""Verification of native-chain account ownership for airdrop claims."""

from __future__ import annotations

import hashlib
import re

from Crypto.Hash import RIPEMD160, keccak
from nacl.exceptions import CryptoError
from nacl.signing import VerifyKey

from .bech32 import Bech32Error, decode_address, encode_address
from .secp256k1 import decompress_point, point_to_bytes, recover_public_key, verify
from .types import BECH32_ACCOUNT_PREFIX

_B58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_HEX_RE = re.compile(r"[0-9a-fA-F]*")
_COSMOS_CHAINS = frozenset({"stargaze", "osmosis", "juno", "cosmos"})
_JSON_ESCAPES = {'"': '\\"', "\\": "\\\\", "\n": "\\n", "\r": "\\r", "\t": "\\t"}


def _json_string(value: str) -> str:
    out = ['"']
    for ch in value:
        code = ord(ch)
        if ch in _JSON_ESCAPES:
            out.append(_JSON_ESCAPES[ch])
        elif code < 0x20 or ch in "<>&" or code in (0x2028, 0x2029):
            out.append(f"\\u{code:04x}")
        elif 0xD800 <= code <= 0xDFFF:
            out.append("\ufffd")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


def sign_message_bytes(chain: str, address: str, reward_addr: str) -> bytes:
    """The JSON document a native account signs to claim its allocation."""
    fields = (("chain", chain), ("address", address), ("rewardAddr", reward_addr))
    body = ",".join(f"{_json_string(k)}:{_json_string(v)}" for k, v in fields)
    return ("{" + body + "}").encode("utf-8")


def _keccak256(data: bytes) -> bytes:
    return keccak.new(digest_bits=256, data=data).digest()


def text_hash(data: bytes) -> bytes:
    """Keccak-256 of data behind the Ethereum signed-message prefix."""
    prefix = f"\x19Ethereum Signed Message:\n{len(data)}".encode()
    return _keccak256(prefix + data)


def b58decode(text: str) -> bytes:
    """Decode a base58 string using the Bitcoin alphabet."""
    if not text:
        raise ValueError("zero length string")
    number = 0
    for ch in text:
        index = _B58_ALPHABET.find(ch)
        if index < 0:
            raise ValueError(f"invalid base58 character {ch!r}")
        number = number * 58 + index
    body = number.to_bytes((number.bit_length() + 7) // 8, "big") if number else b""
    zeros = len(text) - len(text.lstrip("1"))
    return b"\x00" * zeros + body


def evm_address(public_key: bytes) -> str:
    """EIP-55 checksummed address of a secp256k1 public key."""
    x, y = decompress_point(public_key)
    raw = _keccak256(x.to_bytes(32, "big") + y.to_bytes(32, "big"))[12:]
    lower = raw.hex()
    digest = _keccak256(lower.encode()).hex()
    chars = (
        c.upper() if c.isalpha() and int(h, 16) >= 8 else c
        for c, h in zip(lower, digest)
    )
    return "0x" + "".join(chars)


def cosmos_address(hrp: str, public_key: bytes) -> str:
    """Bech32 account address of a 33-byte compressed secp256k1 public key."""
    if len(public_key) != 33:
        raise ValueError("length of pubkey is incorrect")
    digest = RIPEMD160.new(hashlib.sha256(public_key).digest()).digest()
    return encode_address(hrp, digest)


def _hex_decode(text: str) -> bytes:
    if not text:
        raise ValueError("empty hex string")
    if not text.startswith(("0x", "0X")):
        raise ValueError("hex string without 0x prefix")
    body = text[2:]
    if len(body) % 2 or not _HEX_RE.fullmatch(body):
        raise ValueError("invalid hex string")
    return bytes.fromhex(body)


def _verify_solana(address: str, sign_bytes: bytes, signature: str) -> bool:
    public_key = b58decode(address)
    if len(public_key) != 32:
        return False
    if len(signature) < 2:
        return False
    data = bytes.fromhex(signature[2:]) if _HEX_RE.fullmatch(signature[2:]) else None
    if data is None or len(signature[2:]) % 2:
        return False
    sig = data[:64].ljust(64, b"\x00")
    try:
        VerifyKey(public_key).verify(sign_bytes, sig)
    except (CryptoError, ValueError):
        return False
    return True


def _verify_evm(address: str, sign_bytes: bytes, signature: str) -> bool:
    data = bytearray(_hex_decode(signature))
    if len(data) != 65:
        return False
    data[64] = (data[64] - 27) % 256
    recovered = recover_public_key(text_hash(sign_bytes), bytes(data))
    return evm_address(point_to_bytes(recovered, False)) == address


def _verify_terra(address: str, pub_key: str, sign_bytes: bytes, signature: str) -> bool:
    key = _hex_decode(pub_key)
    if cosmos_address("terra", key) != address:
        return False
    sig = _hex_decode(signature)
    return verify(key, hashlib.sha256(sign_bytes).digest(), sig)


def _verify_cosmos(address: str, reward_addr: str) -> bool:
    _, raw = decode_address(address)
    return encode_address(BECH32_ACCOUNT_PREFIX, raw) == reward_addr


def verify_signature(
    chain: str, address: str, pub_key: str, reward_addr: str, signature: str
) -> bool:
    """Return whether the native-chain account proves ownership for the reward address."""
    sign_bytes = sign_message_bytes(chain, address, reward_addr)
    try:
        if chain == "solana":
            return _verify_solana(address, sign_bytes, signature)
        if chain == "evm":
            return _verify_evm(address, sign_bytes, signature)
        if chain == "terra":
            return _verify_terra(address, pub_key, sign_bytes, signature)
        if chain in _COSMOS_CHAINS:
            return _verify_cosmos(address, reward_addr)
    except (ValueError, Bech32Error):
        return False
    return False