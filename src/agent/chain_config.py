# spdx-license-identifier: mit
"""explorer endpoints per chain"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ChainCfg:
    chain_id: int
    etherscan_base: str


CHAINS = {
    "sepolia": ChainCfg(
        11155111,
        "https://api-sepolia.etherscan.io/api",
    ),
    "ethereum": ChainCfg(
        1,
        "https://api.etherscan.io/api",
    ),
    "arbitrum": ChainCfg(
        42161,
        "https://api.arbiscan.io/api",
    ),
    "optimism": ChainCfg(
        10,
        "https://api-optimistic.etherscan.io/api",
    ),
    "base": ChainCfg(
        8453,
        "https://api.basescan.org/api",
    ),
    "polygon": ChainCfg(
        137,
        "https://api.polygonscan.com/api",
    ),
    "bsc": ChainCfg(
        56,
        "https://api.bscscan.com/api",
    ),
}

# chain name aliases
CHAIN_ALIASES = {
    "mainnet": "ethereum",
    "eth": "ethereum",
    "arb": "arbitrum",
    "op": "optimism",
    "bnb": "bsc",
    "binance": "bsc",
}


def normalize_chain(chain_key: str) -> str:
    """Normalize chain name using aliases."""
    return CHAIN_ALIASES.get(chain_key.lower(), chain_key.lower())


def get_chain(chain_key: str) -> ChainCfg:
    key = normalize_chain(chain_key)
    if key not in CHAINS:
        raise KeyError(f"Unsupported chain '{chain_key}'")
    return CHAINS[key]
