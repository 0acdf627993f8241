from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
from contextlib import aclosing
from typing import Any

from web3 import AsyncHTTPProvider, AsyncWeb3

from services.candles.aggregator import CandleAggregator
from services.candles.config import ScanSettings, settings_from_env
from services.candles.contract_reader import resolve_pool_metadata
from services.candles.decoder import SwapFlavor, decode_swap_log
from services.candles.log_scanner import LogScanner
from services.candles.models import Candle, PoolReference, Timeframe
from services.candles.normalizer import normalize_swap
from services.candles.pools import parse_pool_reference
from services.common.chains import resolve_rpc_url
from services.common.errors import CandlesError, InsufficientBlockchainData

LOGGER = logging.getLogger('swapcandles.candles')


def build_web3(rpc_url: str) -> AsyncWeb3:
    return AsyncWeb3(AsyncHTTPProvider(rpc_url, request_kwargs={'timeout': 10}))


async def get_candles(
    pool: PoolReference | str,
    timeframe: Timeframe | str,
    min_candle_count: int | None = None,
    *,
    settings: ScanSettings | None = None,
    web3: Any = None,
    flavor: SwapFlavor = SwapFlavor.v2
) -> list[Candle]:
    """Scan a pool's swap logs and fold them into ascending OHLCV candles.

    Scanning stops as soon as ``min_candle_count`` distinct buckets have been
    seen or the chain head is reached. Fewer buckets than required after a
    complete scan raises :class:`InsufficientBlockchainData`.
    """
    timeframe = Timeframe.parse(timeframe)
    if isinstance(pool, str):
        pool = parse_pool_reference(pool)
    if settings is None:
        settings = settings_from_env()
    required = settings.min_candles if min_candle_count is None else min_candle_count

    if web3 is None:
        web3 = build_web3(resolve_rpc_url(pool.chain, settings.rpc_url))

    token0, token1 = await resolve_pool_metadata(web3, pool.pool_address)

    scanner = LogScanner(web3, settings, flavor)
    aggregator = CandleAggregator(timeframe.milliseconds)
    logs_seen = 0
    skipped = 0
    dropped = 0

    async with aclosing(scanner.scan(pool.pool_address)) as batches:
        async for batch in batches:
            for log in batch.logs:
                logs_seen += 1
                event = decode_swap_log(log, flavor, batch.timestamp_for(log))
                if event is None:
                    skipped += 1
                    continue
                trade = normalize_swap(event, token0, token1, pool.invert_price)
                if trade is None:
                    dropped += 1
                    continue
                aggregator.add(trade)

            if aggregator.bucket_count and aggregator.bucket_count >= required:
                LOGGER.debug(
                    'candle threshold reached pool=%s buckets=%s required=%s to_block=%s',
                    pool.pool_address,
                    aggregator.bucket_count,
                    required,
                    batch.to_block
                )
                break

    LOGGER.info(
        'scan finished pool=%s chain=%s batches=%s logs=%s skipped=%s dropped=%s trades=%s buckets=%s',
        pool.pool_address,
        pool.chain.value,
        scanner.batches_fetched,
        logs_seen,
        skipped,
        dropped,
        aggregator.trade_count,
        aggregator.bucket_count
    )

    if aggregator.bucket_count == 0 or aggregator.bucket_count < required:
        if logs_seen == 0:
            detail = (
                f'no swaps found for pool={pool.pool_address} on chain={pool.chain.value}; '
                f'make sure this is an AMM pool address (not a router). '
                f'found 0 candles, minimum required is {required}'
            )
        else:
            detail = (
                f'only found {aggregator.bucket_count} candles for pool={pool.pool_address} '
                f'on chain={pool.chain.value}, minimum required is {required}'
            )
        raise InsufficientBlockchainData(detail, achieved=aggregator.bucket_count, required=required)

    return aggregator.candles()


def main() -> None:
    parser = argparse.ArgumentParser(description='Build OHLCV candles from AMM pool swap logs')
    parser.add_argument('pair', help="'chain_poolAddress' or 'chain_poolAddress_inverted'")
    parser.add_argument('--timeframe', default='m15', choices=[tf.value for tf in Timeframe])
    parser.add_argument('--min-candles', type=int, default=None, help='Minimum number of candles required')
    parser.add_argument('--flavor', default=SwapFlavor.v2.value, choices=[f.value for f in SwapFlavor])
    parser.add_argument('--rpc-url', default=None, help='RPC endpoint overriding the chain default')
    args = parser.parse_args()

    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )

    settings = settings_from_env().with_overrides(rpc_url=args.rpc_url)
    try:
        candles = asyncio.run(
            get_candles(
                args.pair,
                args.timeframe,
                args.min_candles,
                settings=settings,
                flavor=SwapFlavor(args.flavor)
            )
        )
    except CandlesError as exc:
        LOGGER.error('candle fetch failed error=%s detail=%s', type(exc).__name__, exc.detail)
        raise SystemExit(1) from exc

    print(json.dumps([candle.to_dict() for candle in candles], indent=2))


if __name__ == '__main__':
    main()
