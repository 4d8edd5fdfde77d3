[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "airdropchain"
version = "0.1.0"
description = "Airdrop allocation ledger with cross-chain claim signature verification and interchain-account message types"
requires-python = ">=3.10"
keywords = [
    "airdrop",
    "allocation",
    "bech32",
    "secp256k1",
    "ed25519",
    "signature",
    "interchain",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
    "Topic :: Security :: Cryptography",
]
dependencies = [
    "pycryptodome",
    "pynacl",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["airdropchain"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
