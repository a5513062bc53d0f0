"""Chain identifiers used to scope feeds and cache keys."""

from enum import IntEnum


class Network(IntEnum):
    """EVM chain ids for the networks adapters may run on."""

    MAINNET = 1
    OPTIMISM = 10
    BSC = 56
    POLYGON = 137
    BASE = 8453
    ARBITRUM = 42161
    AVALANCHE = 43114
