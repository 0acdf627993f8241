from __future__ import annotations

from enum import Enum

from services.candles.decoder import SwapFlavor
from services.candles.main import get_candles as fetch_pool_candles
from services.candles.models import Candle
from services.common.errors import ConnectionNotFound


class Connection(str, Enum):
    uniswap_v2 = 'uniswap_v2'
    uniswap_v3 = 'uniswap_v3'

    @classmethod
    def parse(cls, value: str) -> 'Connection':
        try:
            return cls(str(value or '').strip().lower())
        except ValueError as exc:
            raise ConnectionNotFound(value) from exc


async def get_candles(
    connection: Connection | str,
    pair: str,
    timeframe: str,
    min_candles: int | None = None
) -> list[Candle]:
    if not isinstance(connection, Connection):
        connection = Connection.parse(connection)

    if connection is Connection.uniswap_v2:
        flavor = SwapFlavor.v2
    elif connection is Connection.uniswap_v3:
        flavor = SwapFlavor.v3
    else:  # pragma: no cover - closed enum
        raise ConnectionNotFound(connection.value)

    return await fetch_pool_candles(pair, timeframe, min_candles, flavor=flavor)
