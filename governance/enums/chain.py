from enum import Enum


class Chain(str, Enum):
    MAINNET = "mainnet"
    POLYGON = "polygon"
    ARBITRUM = "arbitrum"
    OPTIMISM = "optimism"
    BASE = "base"

    @property
    def chain_id(self) -> int:
        return CHAIN_IDS[self]

    @property
    def explorer_domain(self) -> str:
        return EXPLORER_DOMAINS[self]

    @property
    def block_time_seconds(self) -> int:
        return BLOCK_TIME_SECONDS[self]


CHAIN_IDS = {
    Chain.MAINNET: 1,
    Chain.POLYGON: 137,
    Chain.ARBITRUM: 42161,
    Chain.OPTIMISM: 10,
    Chain.BASE: 8453,
}

EXPLORER_DOMAINS = {
    Chain.MAINNET: "etherscan.io",
    Chain.POLYGON: "polygonscan.com",
    Chain.ARBITRUM: "arbiscan.io",
    Chain.OPTIMISM: "optimistic.etherscan.io",
    Chain.BASE: "basescan.org",
}

# Average seconds per block, used to project timestamps of future blocks
BLOCK_TIME_SECONDS = {
    Chain.MAINNET: 12,
    Chain.POLYGON: 2,
    Chain.ARBITRUM: 1,
    Chain.OPTIMISM: 2,
    Chain.BASE: 2,
}
