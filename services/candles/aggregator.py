from __future__ import annotations

from typing import Iterable

from services.candles.models import Candle, NormalizedTrade


def bucket_start(timestamp_ms: int, timeframe_ms: int) -> int:
    return (timestamp_ms // timeframe_ms) * timeframe_ms


def _trade_order(trade: NormalizedTrade) -> tuple[int, int, int]:
    return trade.timestamp_ms, trade.block_number, trade.log_index


def reduce_bucket(timestamp_ms: int, trades: list[NormalizedTrade]) -> Candle:
    ordered = sorted(trades, key=_trade_order)
    prices = [trade.price for trade in ordered]
    return Candle(
        timestamp_ms=timestamp_ms,
        open=ordered[0].price,
        high=max(prices),
        low=min(prices),
        close=ordered[-1].price,
        volume=sum(trade.volume for trade in ordered)
    )


class CandleAggregator:
    """Groups trades into epoch-aligned buckets and reduces them to candles.

    Trades may arrive in any order. Inside a bucket they are ordered by
    ``(timestamp_ms, block_number, log_index)``; remaining ties keep arrival
    order. Empty buckets are never emitted.
    """

    def __init__(self, timeframe_ms: int) -> None:
        if timeframe_ms <= 0:
            raise ValueError(f'timeframe_ms must be positive, got {timeframe_ms}')
        self.timeframe_ms = timeframe_ms
        self._buckets: dict[int, list[NormalizedTrade]] = {}
        self.trade_count = 0

    def add(self, trade: NormalizedTrade) -> None:
        key = bucket_start(trade.timestamp_ms, self.timeframe_ms)
        self._buckets.setdefault(key, []).append(trade)
        self.trade_count += 1

    def extend(self, trades: Iterable[NormalizedTrade]) -> None:
        for trade in trades:
            self.add(trade)

    @property
    def bucket_count(self) -> int:
        return len(self._buckets)

    def candles(self) -> list[Candle]:
        return [reduce_bucket(key, self._buckets[key]) for key in sorted(self._buckets)]


def aggregate_trades(trades: Iterable[NormalizedTrade], timeframe_ms: int) -> list[Candle]:
    aggregator = CandleAggregator(timeframe_ms)
    aggregator.extend(trades)
    return aggregator.candles()
