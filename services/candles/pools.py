from __future__ import annotations

from web3 import Web3

from services.candles.models import PoolReference
from services.common.chains import Chain
from services.common.errors import InvalidAddress, InvalidPoolFormat

INVERTED_FLAG = 'inverted'


def normalize_address(value: str) -> str:
    candidate = str(value or '').strip()
    if not Web3.is_address(candidate):
        raise InvalidAddress(candidate)
    return Web3.to_checksum_address(candidate)


def parse_pool_reference(pair: str) -> PoolReference:
    """Parse ``chain_pool[_inverted]`` or ``token_chain_pool[_inverted]``."""
    parts = [part.strip() for part in str(pair or '').split('_')]
    if len(parts) < 2 or not all(parts):
        raise InvalidPoolFormat(
            f"expected 'chain_poolAddress' or 'chain_poolAddress_inverted', got: {pair!r}"
        )

    token_address: str | None = None
    if parts[0].lower().startswith('0x'):
        if len(parts) < 3:
            raise InvalidPoolFormat(
                f"expected 'tokenAddress_chain_poolAddress[_inverted]', got: {pair!r}"
            )
        token_address = normalize_address(parts[0])
        parts = parts[1:]

    chain = Chain.parse(parts[0])
    pool_address = normalize_address(parts[1])
    invert_price = any(part.lower() == INVERTED_FLAG for part in parts[2:])

    return PoolReference(
        chain=chain,
        pool_address=pool_address,
        invert_price=invert_price,
        token_address=token_address
    )
