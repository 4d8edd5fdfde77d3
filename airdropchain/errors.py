"""Error types raised by the airdrop and interchain-transaction modules."""

from __future__ import annotations

from typing import ClassVar


class ModuleError(Exception):
    """Base error carrying a codespace, a numeric code and a description.

    Every concrete subclass registers its (codespace, code) pair; a second
    class claiming the same pair is rejected when it is defined.
    """

    codespace: ClassVar[str] = ""
    code: ClassVar[int] = 0
    description: ClassVar[str] = ""
    _registered: ClassVar[dict[tuple[str, int], type[ModuleError]]] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if "code" not in cls.__dict__:
            return
        key = (cls.codespace, cls.code)
        existing = ModuleError._registered.get(key)
        if existing is not None and existing is not cls:
            raise ValueError(
                f"error with code {cls.code} is already registered in "
                f"codespace {cls.codespace!r}: {existing.description!r}"
            )
        ModuleError._registered[key] = cls

    def __init__(self, detail: str | None = None):
        self.detail = detail
        message = f"{detail}: {self.description}" if detail else self.description
        super().__init__(message)


class _AirdropError(ModuleError):
    codespace = "airdrop"


class _InterTxError(ModuleError):
    codespace = "intertx"


class _SdkError(ModuleError):
    codespace = "sdk"


class EmptyRewardAddressError(_AirdropError):
    code = 1
    description = "empty reward address"


class EmptyOnChainAllocationAddressError(_AirdropError):
    code = 2
    description = "empty on-chain allocation address"


class AllocationDoesNotExistError(_AirdropError):
    code = 3
    description = "airdrop allocation does not exists for the address"


class AllocationAlreadyClaimedError(_AirdropError):
    code = 4
    description = "airdrop allocation is already claimed for the address"


class SignatureVerificationError(_AirdropError):
    code = 5
    description = "native chain account signature verification failure"


class EmptyAddressError(_AirdropError):
    code = 6
    description = "empty address"


class NotEnoughPermissionError(_AirdropError):
    code = 7
    description = "not enough permission for the action"


class IBCAccountAlreadyExistError(_InterTxError):
    code = 2
    description = "interchain account already registered"


class IBCAccountNotExistError(_InterTxError):
    code = 3
    description = "interchain account not exist"


class UnknownRequestError(_SdkError):
    code = 6
    description = "unknown request"


class InvalidAddressError(_SdkError):
    code = 7
    description = "invalid address"


class InvalidRequestError(_SdkError):
    code = 18
    description = "invalid request"


class NotFoundError(_SdkError):
    code = 38
    description = "not found"