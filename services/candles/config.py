from __future__ import annotations

import os
from dataclasses import dataclass, replace

BLOCK_SCAN_HARD_CAP = 1_000_000

DEFAULT_BATCH_SIZE = 1000
DEFAULT_RPC_DELAY_MS = 50
DEFAULT_MIN_CANDLES = 250
DEFAULT_MAX_BLOCKS = 200_000


@dataclass(frozen=True)
class ScanSettings:
    rpc_url: str
    batch_size: int
    rpc_delay_ms: int
    min_candles: int
    max_blocks: int

    @property
    def block_range(self) -> int:
        return min(self.max_blocks, BLOCK_SCAN_HARD_CAP)

    def with_overrides(self, **changes) -> 'ScanSettings':
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _int_env(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name, '').strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    if value < minimum:
        return default
    return value


def settings_from_env() -> ScanSettings:
    return ScanSettings(
        rpc_url=os.getenv('RPC_URL', '').strip(),
        batch_size=_int_env('UNISWAP_BATCH_SIZE', DEFAULT_BATCH_SIZE, minimum=1),
        rpc_delay_ms=_int_env('UNISWAP_RPC_DELAY_MS', DEFAULT_RPC_DELAY_MS),
        min_candles=_int_env('UNISWAP_MIN_CANDLES', DEFAULT_MIN_CANDLES, minimum=1),
        max_blocks=_int_env('UNISWAP_MAX_BLOCKS', DEFAULT_MAX_BLOCKS, minimum=1)
    )
