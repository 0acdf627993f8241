from __future__ import annotations

import math
import sys

from services.candles.models import NormalizedTrade, RawSwapEvent, TokenMetadata

EPSILON = sys.float_info.epsilon


def scale_amount(raw_amount: int, decimals: int) -> float:
    return raw_amount / (10 ** decimals)


def price_and_volume(amount0: float, amount1: float, invert_price: bool = False) -> tuple[float, float] | None:
    abs0 = abs(amount0)
    abs1 = abs(amount1)
    if not (abs0 > EPSILON and abs1 > EPSILON):
        return None

    price = abs0 / abs1 if invert_price else abs1 / abs0
    # Token-amount size proxy; no USD oracle is consulted.
    volume = max(abs0, abs1)
    if not (math.isfinite(price) and math.isfinite(volume)) or price <= 0:
        return None
    return price, volume


def normalize_swap(
    event: RawSwapEvent,
    token0: TokenMetadata,
    token1: TokenMetadata,
    invert_price: bool = False
) -> NormalizedTrade | None:
    delta0, delta1 = event.deltas()
    result = price_and_volume(
        scale_amount(delta0, token0.decimals),
        scale_amount(delta1, token1.decimals),
        invert_price
    )
    if result is None:
        return None

    price, volume = result
    return NormalizedTrade(
        timestamp_ms=event.block_timestamp * 1000,
        price=price,
        volume=volume,
        block_number=event.block_number,
        log_index=event.log_index
    )
