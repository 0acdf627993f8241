from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum

from services.common.chains import Chain
from services.common.errors import UnsupportedTimeframe

UINT256_MAX = 2**256 - 1
INT256_LIMIT = 2**255

_MINUTE_MS = 60 * 1000
_HOUR_MS = 60 * _MINUTE_MS
_DAY_MS = 24 * _HOUR_MS


class Timeframe(str, Enum):
    m3 = 'm3'
    m5 = 'm5'
    m15 = 'm15'
    m30 = 'm30'
    h1 = 'h1'
    h4 = 'h4'
    d1 = 'd1'
    w1 = 'w1'
    mn1 = 'mn1'

    @classmethod
    def parse(cls, value: 'str | Timeframe') -> 'Timeframe':
        if isinstance(value, Timeframe):
            return value
        try:
            return cls(str(value or '').strip().lower())
        except ValueError as exc:
            raise UnsupportedTimeframe(str(value)) from exc

    @property
    def milliseconds(self) -> int:
        return _TIMEFRAME_MS[self]


# Months are treated as a fixed 30 days.
_TIMEFRAME_MS: dict[Timeframe, int] = {
    Timeframe.m3: 3 * _MINUTE_MS,
    Timeframe.m5: 5 * _MINUTE_MS,
    Timeframe.m15: 15 * _MINUTE_MS,
    Timeframe.m30: 30 * _MINUTE_MS,
    Timeframe.h1: _HOUR_MS,
    Timeframe.h4: 4 * _HOUR_MS,
    Timeframe.d1: _DAY_MS,
    Timeframe.w1: 7 * _DAY_MS,
    Timeframe.mn1: 30 * _DAY_MS
}


def checked_delta(amount_out: int, amount_in: int) -> int:
    """Signed ``amount_out - amount_in`` clamped to 0 when it leaves the int256 range."""
    if amount_out > amount_in:
        delta = amount_out - amount_in
        return delta if delta < INT256_LIMIT else 0
    delta = amount_in - amount_out
    return -delta if delta < INT256_LIMIT else 0


@dataclass(frozen=True)
class PoolReference:
    chain: Chain
    pool_address: str
    invert_price: bool = False
    token_address: str | None = None


@dataclass(frozen=True)
class TokenMetadata:
    address: str
    decimals: int


@dataclass(frozen=True)
class RawSwapEvent:
    block_timestamp: int
    amount0_in: int
    amount1_in: int
    amount0_out: int
    amount1_out: int
    block_number: int = 0
    log_index: int = 0

    def deltas(self) -> tuple[int, int]:
        return (
            checked_delta(self.amount0_out, self.amount0_in),
            checked_delta(self.amount1_out, self.amount1_in)
        )


@dataclass(frozen=True)
class NormalizedTrade:
    timestamp_ms: int
    price: float
    volume: float
    block_number: int = 0
    log_index: int = 0


@dataclass
class Candle:
    timestamp_ms: int
    open: float
    high: float
    low: float
    close: float
    volume: float

    def to_dict(self) -> dict:
        return asdict(self)
