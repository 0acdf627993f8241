from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from prometheus_client import Counter, make_asgi_app

from services.common.errors import CandlesError, InsufficientBlockchainData

from .config import configure_logging, get_settings
from .connections import Connection, get_candles

settings = get_settings()
configure_logging(settings)
logger = logging.getLogger(__name__)

CANDLE_REQUESTS_TOTAL = Counter(
    'swapcandles_candle_requests_total',
    'Candle requests served by the API',
    ['connection', 'outcome']
)

app = FastAPI(title=settings.app_name, default_response_class=ORJSONResponse)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[x.strip() for x in settings.cors_origins.split(',') if x.strip()],
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*']
)
app.mount('/metrics', make_asgi_app())


def _error_detail(exc: CandlesError) -> dict:
    detail = {'error': type(exc).__name__, 'message': exc.detail}
    if isinstance(exc, InsufficientBlockchainData):
        detail['achieved'] = exc.achieved
        detail['required'] = exc.required
    block_range = getattr(exc, 'block_range', None)
    if block_range is not None:
        detail['block_range'] = list(block_range)
    return detail


@app.get('/health')
async def health() -> dict[str, str]:
    return {'status': 'ok'}


@app.get('/candles')
async def candles(
    pair: str,
    connection: str = Query(default='uniswap_v2'),
    timeframe: str = Query(default='m15'),
    min_candles: int | None = Query(default=None, ge=1, le=settings.max_min_candles)
) -> dict:
    label = connection if connection in {c.value for c in Connection} else 'unknown'
    try:
        result = await get_candles(connection, pair, timeframe, min_candles)
    except CandlesError as exc:
        CANDLE_REQUESTS_TOTAL.labels(connection=label, outcome=type(exc).__name__).inc()
        logger.warning('candle request failed connection=%s pair=%s error=%s', connection, pair, exc)
        raise HTTPException(status_code=exc.status_code, detail=_error_detail(exc)) from exc

    CANDLE_REQUESTS_TOTAL.labels(connection=label, outcome='ok').inc()
    return {
        'connection': connection,
        'pair': pair,
        'timeframe': timeframe,
        'count': len(result),
        'candles': [candle.to_dict() for candle in result]
    }
