"""Airdrop allocation ledger with cross-chain claim verification and interchain-account messages."""

__version__ = "0.1.0"