from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from eth_abi import decode
from web3 import Web3

from services.candles.models import RawSwapEvent

LOGGER = logging.getLogger('swapcandles.decoder')

MIN_SWAP_DATA_BYTES = 128


def _hex_prefixed(value: Any) -> str:
    raw = value.hex() if hasattr(value, 'hex') else str(value)
    if raw.startswith('0x'):
        return raw.lower()
    return f'0x{raw}'.lower()


class SwapFlavor(str, Enum):
    v2 = 'v2'
    v3 = 'v3'

    @property
    def event_signature(self) -> str:
        if self is SwapFlavor.v3:
            return 'Swap(address,address,int256,int256,uint160,uint128,int24)'
        return 'Swap(address,uint256,uint256,uint256,uint256,address)'

    @property
    def topic(self) -> str:
        return _hex_prefixed(Web3.keccak(text=self.event_signature))


def _as_int(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, (bytes, bytearray)):
        return int.from_bytes(value, byteorder='big')
    try:
        return int(str(value), 0)
    except ValueError:
        return None


def log_block_timestamp(log: Any) -> int | None:
    return _as_int(log.get('blockTimestamp'))


def _log_data(log: Any) -> bytes:
    data = log.get('data', b'')
    if isinstance(data, str):
        return bytes.fromhex(data[2:] if data.startswith('0x') else data)
    return bytes(data)


def decode_swap_log(
    log: Any,
    flavor: SwapFlavor = SwapFlavor.v2,
    block_timestamp: int | None = None
) -> RawSwapEvent | None:
    """Decode one swap log into a :class:`RawSwapEvent`.

    Returns ``None`` for logs that are structurally unusable (no topics, short
    payload, no timestamp). ``block_timestamp`` is only consulted when the log
    itself carries no ``blockTimestamp`` field.
    """
    topics = log.get('topics') or []
    try:
        data = _log_data(log)
    except ValueError:
        LOGGER.debug(
            'skipping swap log with non-hex data block=%s log_index=%s',
            log.get('blockNumber'),
            log.get('logIndex')
        )
        return None
    if not topics or len(data) < MIN_SWAP_DATA_BYTES:
        LOGGER.debug(
            'skipping malformed swap log block=%s log_index=%s topics=%s data_len=%s',
            log.get('blockNumber'),
            log.get('logIndex'),
            len(topics),
            len(data)
        )
        return None

    timestamp = log_block_timestamp(log)
    if timestamp is None:
        timestamp = block_timestamp
    if timestamp is None:
        LOGGER.debug('skipping swap log without timestamp block=%s', log.get('blockNumber'))
        return None

    block_number = _as_int(log.get('blockNumber')) or 0
    log_index = _as_int(log.get('logIndex')) or 0

    if flavor is SwapFlavor.v3:
        amount0, amount1 = decode(['int256', 'int256'], data[:64])
        # Pool-side signed amounts: positive flowed into the pool.
        return RawSwapEvent(
            block_timestamp=timestamp,
            amount0_in=max(amount0, 0),
            amount1_in=max(amount1, 0),
            amount0_out=max(-amount0, 0),
            amount1_out=max(-amount1, 0),
            block_number=block_number,
            log_index=log_index
        )

    amount0_in, amount1_in, amount0_out, amount1_out = decode(
        ['uint256', 'uint256', 'uint256', 'uint256'],
        data[:MIN_SWAP_DATA_BYTES]
    )
    return RawSwapEvent(
        block_timestamp=timestamp,
        amount0_in=amount0_in,
        amount1_in=amount1_in,
        amount0_out=amount0_out,
        amount1_out=amount1_out,
        block_number=block_number,
        log_index=log_index
    )
