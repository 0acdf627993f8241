from __future__ import annotations

import asyncio
import logging
from typing import Any

from web3 import Web3

from services.candles.models import TokenMetadata
from services.common.errors import InvalidBlockchainData, RpcError

LOGGER = logging.getLogger('swapcandles.contract_reader')

WORD_SIZE = 32


def _selector(signature: str) -> bytes:
    return bytes(Web3.keccak(text=signature)[:4])


SELECTOR_TOKEN0 = _selector('token0()')
SELECTOR_TOKEN1 = _selector('token1()')
SELECTOR_DECIMALS = _selector('decimals()')


async def _eth_call(web3: Any, to: str, selector: bytes, name: str) -> bytes:
    try:
        result = await web3.eth.call({'to': to, 'data': selector})
    except Exception as exc:
        raise RpcError(f'failed to call {name} on {to}: {exc}', call=name) from exc
    return bytes(result)


async def _gather_calls(*calls):
    # all calls settle before the first failure is raised
    results = await asyncio.gather(*calls, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


def _word_address(result: bytes, name: str, to: str) -> str:
    if len(result) < WORD_SIZE:
        raise InvalidBlockchainData(f'invalid {name} response from {to}: {len(result)} bytes')
    return Web3.to_checksum_address(result[12:WORD_SIZE])


async def resolve_pool_tokens(web3: Any, pool_address: str) -> tuple[str, str]:
    result0, result1 = await _gather_calls(
        _eth_call(web3, pool_address, SELECTOR_TOKEN0, 'token0()'),
        _eth_call(web3, pool_address, SELECTOR_TOKEN1, 'token1()')
    )
    return (
        _word_address(result0, 'token0()', pool_address),
        _word_address(result1, 'token1()', pool_address)
    )


async def resolve_decimals(web3: Any, token_address: str) -> int:
    result = await _eth_call(web3, token_address, SELECTOR_DECIMALS, 'decimals()')
    if len(result) < WORD_SIZE:
        raise InvalidBlockchainData(f'invalid decimals() response from {token_address}: {len(result)} bytes')
    # uint8 right-aligned in a 32-byte word
    return result[WORD_SIZE - 1]


async def resolve_pool_metadata(web3: Any, pool_address: str) -> tuple[TokenMetadata, TokenMetadata]:
    token0, token1 = await resolve_pool_tokens(web3, pool_address)
    decimals0, decimals1 = await _gather_calls(
        resolve_decimals(web3, token0),
        resolve_decimals(web3, token1)
    )
    LOGGER.info(
        'resolved pool tokens pool=%s token0=%s decimals0=%s token1=%s decimals1=%s',
        pool_address,
        token0,
        decimals0,
        token1,
        decimals1
    )
    return TokenMetadata(address=token0, decimals=decimals0), TokenMetadata(address=token1, decimals=decimals1)
