from __future__ import annotations

import os
from enum import Enum

from services.common.errors import UnsupportedChain


class Chain(str, Enum):
    ethereum = 'ethereum'
    base = 'base'
    bnb = 'bnb'
    polygon = 'polygon'
    arbitrum = 'arbitrum'

    @classmethod
    def parse(cls, tag: str) -> 'Chain':
        key = str(tag or '').strip().lower()
        chain = CHAIN_ALIASES.get(key)
        if chain is None:
            raise UnsupportedChain(tag)
        return chain

    @property
    def rpc_env_key(self) -> str:
        return f'{self.value.upper()}_RPC_URL'

    @property
    def default_rpc_url(self) -> str:
        return DEFAULT_RPC_URLS[self]


CHAIN_ALIASES: dict[str, Chain] = {
    'ethereum': Chain.ethereum,
    'eth': Chain.ethereum,
    'mainnet': Chain.ethereum,
    'base': Chain.base,
    'bnb': Chain.bnb,
    'bsc': Chain.bnb,
    'binance': Chain.bnb,
    'polygon': Chain.polygon,
    'matic': Chain.polygon,
    'arbitrum': Chain.arbitrum,
    'arb': Chain.arbitrum
}

DEFAULT_RPC_URLS: dict[Chain, str] = {
    Chain.ethereum: 'https://eth.llamarpc.com',
    Chain.base: 'https://base.llamarpc.com',
    Chain.bnb: 'https://binance.llamarpc.com',
    Chain.polygon: 'https://polygon.llamarpc.com',
    Chain.arbitrum: 'https://arbitrum.llamarpc.com'
}


def resolve_rpc_url(chain: Chain, override: str | None = None) -> str:
    explicit = str(override or '').strip()
    if explicit:
        return explicit
    return os.getenv(chain.rpc_env_key, '').strip() or chain.default_rpc_url
