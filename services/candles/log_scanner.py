from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator

from services.candles.config import ScanSettings
from services.candles.decoder import SwapFlavor, log_block_timestamp
from services.common.errors import RpcError

LOGGER = logging.getLogger('swapcandles.log_scanner')


@dataclass
class ScanBatch:
    from_block: int
    to_block: int
    logs: list[Any]
    block_timestamps: dict[int, int] = field(default_factory=dict)

    def timestamp_for(self, log: Any) -> int | None:
        return self.block_timestamps.get(log.get('blockNumber'))


class LogScanner:
    """Sequential, paced block-window scan for one pool's swap logs.

    ``scan`` is an async generator; the consumer stops it early simply by
    leaving the ``async for`` loop. Any failing request aborts the scan.
    """

    def __init__(self, web3: Any, settings: ScanSettings, flavor: SwapFlavor = SwapFlavor.v2) -> None:
        self.web3 = web3
        self.settings = settings
        self.flavor = flavor
        self.batches_fetched = 0
        self._block_ts_cache: dict[int, int] = {}

    async def current_block(self) -> int:
        try:
            return int(await self.web3.eth.block_number)
        except Exception as exc:
            raise RpcError(f'failed to get block number: {exc}', call='eth_blockNumber') from exc

    def start_block(self, current_block: int) -> int:
        return max(0, current_block - self.settings.block_range)

    async def scan(self, pool_address: str) -> AsyncIterator[ScanBatch]:
        current_block = await self.current_block()
        from_block = self.start_block(current_block)
        LOGGER.info(
            'scan started pool=%s flavor=%s from_block=%s to_block=%s batch_size=%s',
            pool_address,
            self.flavor.value,
            from_block,
            current_block,
            self.settings.batch_size
        )

        while from_block <= current_block:
            if self.batches_fetched and self.settings.rpc_delay_ms > 0:
                await asyncio.sleep(self.settings.rpc_delay_ms / 1000)

            to_block = min(from_block + self.settings.batch_size - 1, current_block)
            logs = await self._fetch_logs(pool_address, from_block, to_block)
            self.batches_fetched += 1
            timestamps = await self._missing_timestamps(logs)
            LOGGER.debug(
                'batch fetched pool=%s from_block=%s to_block=%s logs=%s',
                pool_address,
                from_block,
                to_block,
                len(logs)
            )
            yield ScanBatch(from_block=from_block, to_block=to_block, logs=logs, block_timestamps=timestamps)
            from_block = to_block + 1

    async def _fetch_logs(self, pool_address: str, from_block: int, to_block: int) -> list[Any]:
        try:
            logs = await self.web3.eth.get_logs(
                {
                    'fromBlock': from_block,
                    'toBlock': to_block,
                    'address': pool_address,
                    'topics': [self.flavor.topic]
                }
            )
        except Exception as exc:
            raise RpcError(
                f'failed to fetch logs for blocks {from_block}-{to_block}: {exc}',
                call='eth_getLogs',
                block_range=(from_block, to_block)
            ) from exc
        return list(logs)

    async def _missing_timestamps(self, logs: list[Any]) -> dict[int, int]:
        timestamps: dict[int, int] = {}
        for log in logs:
            if log_block_timestamp(log) is not None:
                continue
            block_number = log.get('blockNumber')
            if block_number is None or block_number in timestamps:
                continue
            timestamps[block_number] = await self._block_timestamp(block_number)
        return timestamps

    async def _block_timestamp(self, block_number: int) -> int:
        if block_number in self._block_ts_cache:
            return self._block_ts_cache[block_number]

        try:
            block = await self.web3.eth.get_block(block_number)
        except Exception as exc:
            raise RpcError(
                f'failed to get block {block_number}: {exc}',
                call='eth_getBlockByNumber',
                block_range=(block_number, block_number)
            ) from exc
        ts = int(block['timestamp'])
        self._block_ts_cache[block_number] = ts
        return ts
