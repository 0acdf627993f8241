from __future__ import annotations

from typing import Any

from eth_abi import encode

from services.candles.config import ScanSettings
from services.candles.contract_reader import SELECTOR_DECIMALS, SELECTOR_TOKEN0, SELECTOR_TOKEN1
from services.candles.decoder import SwapFlavor

POOL = '0x' + '11' * 20
TOKEN0 = '0x' + '22' * 20
TOKEN1 = '0x' + '33' * 20


def address_word(address: str) -> bytes:
    return b'\x00' * 12 + bytes.fromhex(address[2:])


def uint_word(value: int) -> bytes:
    return value.to_bytes(32, byteorder='big')


def pool_calls(decimals0: int = 18, decimals1: int = 18) -> dict[tuple[str, bytes], Any]:
    return {
        (POOL.lower(), SELECTOR_TOKEN0): address_word(TOKEN0),
        (POOL.lower(), SELECTOR_TOKEN1): address_word(TOKEN1),
        (TOKEN0.lower(), SELECTOR_DECIMALS): uint_word(decimals0),
        (TOKEN1.lower(), SELECTOR_DECIMALS): uint_word(decimals1)
    }


def swap_log(
    block_number: int,
    amount0_in: int = 0,
    amount1_in: int = 0,
    amount0_out: int = 0,
    amount1_out: int = 0,
    *,
    timestamp: int | None = None,
    log_index: int = 0
) -> dict[str, Any]:
    log: dict[str, Any] = {
        'address': POOL,
        'topics': [bytes.fromhex(SwapFlavor.v2.topic[2:])],
        'data': encode(['uint256', 'uint256', 'uint256', 'uint256'], [amount0_in, amount1_in, amount0_out, amount1_out]),
        'blockNumber': block_number,
        'logIndex': log_index
    }
    if timestamp is not None:
        log['blockTimestamp'] = timestamp
    return log


def priced_log(block_number: int, timestamp: int, price: float, log_index: int = 0) -> dict[str, Any]:
    """A v2 swap selling 1 token0 (18 decimals) for ``price`` token1 (18 decimals)."""
    return swap_log(
        block_number,
        amount0_in=10**18,
        amount1_out=int(price * 10**18),
        timestamp=timestamp,
        log_index=log_index
    )


def scan_settings(**overrides: Any) -> ScanSettings:
    values = {
        'rpc_url': '',
        'batch_size': 1000,
        'rpc_delay_ms': 0,
        'min_candles': 1,
        'max_blocks': 5000
    }
    values.update(overrides)
    return ScanSettings(**values)


class FakeEth:
    def __init__(
        self,
        block_number: int = 4999,
        logs: list[dict[str, Any]] | None = None,
        calls: dict[tuple[str, bytes], Any] | None = None,
        block_timestamps: dict[int, int] | None = None,
        fail_on_batch: int | None = None,
        fail_block_number: bool = False
    ) -> None:
        self._block_number = block_number
        self.logs = logs or []
        self.calls = pool_calls() if calls is None else calls
        self.block_timestamps = block_timestamps or {}
        self.fail_on_batch = fail_on_batch
        self.fail_block_number = fail_block_number
        self.get_logs_calls: list[tuple[int, int]] = []
        self.get_block_calls: list[int] = []
        self.call_count = 0

    @property
    def block_number(self):
        return self._current_block()

    async def _current_block(self) -> int:
        if self.fail_block_number:
            raise ConnectionError('rpc unreachable')
        return self._block_number

    async def get_logs(self, params: dict[str, Any]) -> list[dict[str, Any]]:
        from_block = params['fromBlock']
        to_block = params['toBlock']
        self.get_logs_calls.append((from_block, to_block))
        if self.fail_on_batch is not None and len(self.get_logs_calls) == self.fail_on_batch:
            raise ConnectionError('429 too many requests')
        return [log for log in self.logs if from_block <= log['blockNumber'] <= to_block]

    async def call(self, tx: dict[str, Any]) -> bytes:
        self.call_count += 1
        result = self.calls[(tx['to'].lower(), bytes(tx['data']))]
        if isinstance(result, Exception):
            raise result
        return result

    async def get_block(self, block_number: int) -> dict[str, Any]:
        self.get_block_calls.append(block_number)
        return {'number': block_number, 'timestamp': self.block_timestamps[block_number]}


class FakeWeb3:
    def __init__(self, **kwargs: Any) -> None:
        self.eth = FakeEth(**kwargs)
